import datetime
import pytest
from flask import Flask
from api_playground import DB as db, PlaygroundAPI


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


recipe_categories = db.Table(
    "recipe_categories",
    db.Column("recipe_id", db.Integer, db.ForeignKey("recipes.id"), primary_key=True),
    db.Column("category_id", db.Integer, db.ForeignKey("categories.id"), primary_key=True),
)


class Author(db.Model):
    __tablename__ = "authors"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False)
    email = db.Column(db.String)
    recipes = db.relationship("Recipe", back_populates="author")


class Category(db.Model):
    __tablename__ = "categories"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False)


class Recipe(db.Model):
    __tablename__ = "recipes"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String, nullable=False, index=True)
    body = db.Column(db.Text, nullable=False)
    locked = db.Column(db.Boolean, default=False)
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"))
    author = db.relationship("Author", back_populates="recipes")
    categories = db.relationship("Category", secondary=recipe_categories)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def _s_validate(self):
        if self.title and len(self.title) > 100:
            return {"title": ["is too long (maximum is 100 characters)"]}
        return {}

    def _s_before_destroy(self):
        return not self.locked


class Rating(db.Model):
    __tablename__ = "ratings"
    recipe_id = db.Column(db.Integer, db.ForeignKey("recipes.id"), primary_key=True)
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"), primary_key=True)
    score = db.Column(db.Integer, nullable=False)


RECIPES = [
    ("Spaghetti Carbonara", "Classic Italian pasta dish with eggs and cheese"),
    ("Chicken Tikka Masala", "Creamy Indian curry with tender chicken pieces"),
    ("Beef Tacos", "Mexican-style tacos with seasoned ground beef"),
    ("Vegetable Stir Fry", "Quick and healthy Asian-inspired vegetable dish"),
    ("Chocolate Chip Cookies", "Sweet homemade cookies with chocolate chips"),
]


@pytest.fixture
def app():
    app = Flask("test_playground")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite://", TESTING=True)
    db.init_app(app)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def api(app):
    """
    Playground with create, update and delete enabled
    """
    api = PlaygroundAPI(app, name="playground")
    api.playground_for(
        "recipe",
        Recipe,
        attributes=["title", "body"],
        requests={"create": {"fields": ["title", "body"]}, "update": {"fields": ["title", "body"]}, "delete": True},
    )
    return api


@pytest.fixture
def restricted_api(app):
    """
    Playground with pagination disabled, create/update disabled and no docs
    """
    api = PlaygroundAPI(app, prefix="/api/test_playground", name="test_playground", docs=False)
    api.playground_for(
        "recipe",
        Recipe,
        attributes=["title", "body"],
        pagination={"enabled": False, "page_size": 15, "total_count": False},
        requests={"create": False, "update": False, "delete": True},
    )
    return api


@pytest.fixture
def client(app, api, restricted_api):
    return app.test_client()


@pytest.fixture
def recipes(app):
    result = [Recipe(title=title, body=body) for title, body in RECIPES]
    db.session.add_all(result)
    db.session.commit()
    return result


@pytest.fixture
def recipe(recipes):
    return recipes[0]


def reload(model, record_id):
    db.session.expire_all()
    return db.session.get(model, record_id)
