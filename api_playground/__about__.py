__version__ = "0.3.0"
__description__ = "api_playground : declarative JSON:API playground for Flask-SQLAlchemy models"
