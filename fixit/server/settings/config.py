from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "FixIt Repairs")
    environment: str = os.getenv("ENVIRONMENT", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Lagring
    repairs_file: str = os.getenv("REPAIRS_FILE", "./repairs.json")
    upload_dir: str = os.getenv("UPLOAD_DIR", "./uploads")

    # Admin-inloggning (tomt = ingen kan logga in)
    admin_username: str = os.getenv("ADMIN_USERNAME", "")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "")
    session_ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "28800"))

    # WhatsApp via Twilio
    twilio_account_sid: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    twilio_auth_token: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    whatsapp_from: str = os.getenv("WHATSAPP_FROM", "whatsapp:+14155238886")  # Twilio sandbox
    whatsapp_to: str = os.getenv("WHATSAPP_TO", "")

    # E-post
    smtp_host: str = os.getenv("SMTP_HOST", "")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_username: str = os.getenv("SMTP_USERNAME", "")
    smtp_password: str = os.getenv("SMTP_PASSWORD", "")
    smtp_starttls: bool = os.getenv("SMTP_STARTTLS", "1") == "1"
    mail_from: str = os.getenv("MAIL_FROM", "")
    mail_to: str = os.getenv("MAIL_TO", "")

    notify_timeout: float = float(os.getenv("NOTIFY_TIMEOUT", "5"))

    @property
    def secure_cookies(self) -> bool:
        return self.environment != "dev"


settings = Settings()
