# app/core/deps.py
from fastapi import Request
from app.core.config import Settings
from app.services.mailer import EmailSender

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_mailer(request: Request) -> EmailSender:
    return request.app.state.mailer
