# Re-export the application instance from app.main so the startup lifecycle (table creation +
# service start) runs regardless of the import target (app:app vs app.main:app).
from .main import app
