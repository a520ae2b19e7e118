# extensions.py
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()

# Create Limiter but do not bind app here; storage and defaults come from app.config in create_app
limiter = Limiter(key_func=get_remote_address)
