# app/utils/formatting.py

def escape_html(value) -> str:
    # "&" d'abord, sinon on ré-échappe les entités produites ensuite
    return str(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def nl_to_br(text: str) -> str:
    return text.replace("\n", "<br/>")
