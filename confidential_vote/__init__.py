# confidential_vote/__init__.py

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.middleware.proxy_fix import ProxyFix
import os
from flask_jwt_extended import JWTManager
from datetime import timedelta


app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'change-me-in-production')
app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET_KEY', 'change-me-in-production-jwt-secret-key')
app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(minutes=30)
app.config['JWT_TOKEN_LOCATION'] = ['headers']  # Authorization: Bearer <token>

app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///confidential_vote.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

# Election deployment parameters
app.config['ELECTION_ADMINISTRATOR'] = os.environ.get(
    'ELECTION_ADMINISTRATOR', '0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266'
).lower()
app.config['ELECTION_ADDRESS'] = os.environ.get(
    'ELECTION_ADDRESS', '0x5fbdb2315678afecb367f032d93f642f64180aa3'
).lower()
app.config['ELECTION_NUM_PROPOSALS'] = int(os.environ.get('ELECTION_NUM_PROPOSALS', '3'))
app.config['REGISTRATION_FEE_WEI'] = int(os.environ.get('REGISTRATION_FEE_WEI', str(5 * 10 ** 15)))  # 0.005 ether
app.config['INPUT_ENCRYPTION_KEY'] = os.environ.get('INPUT_ENCRYPTION_KEY', 'default-input-key-change-in-production')
app.config['EVENT_LOG_DIR'] = os.environ.get('EVENT_LOG_DIR', 'logs')

app.config['RATELIMIT_ENABLED'] = os.environ.get('RATELIMIT_ENABLED', 'true').lower() in ('1', 'true', 'yes')

jwt = JWTManager(app)

# Fix proxy headers for HTTPS
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

# Initialize extensions
db = SQLAlchemy(app)  # Fee ledger ORM
migrate = Migrate(app, db)  # DB migrations

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["10000/hour"],
    storage_uri=os.environ.get('RATELIMIT_STORAGE_URI', 'memory://'),
)
limiter.init_app(app)


# Ensure model modules are imported so SQLAlchemy metadata is populated
# This makes models discoverable by Flask-Migrate / Alembic when running
# `flask db migrate`.
from confidential_vote.database import models  # noqa: F401,E402

from confidential_vote import routes  # noqa: F401,E402
from confidential_vote import commands  # noqa: F401,E402
