#!/usr/bin/env python
# run:
# $ FLASK_APP=demo_playground flask run
# $ curl http://127.0.0.1:5000/api/playground/recipes
#
# protected playground:
# $ PLAYGROUND_PROTECTED=1 FLASK_APP=demo_playground flask run
# $ FLASK_APP=demo_playground flask playground-keys create
# $ curl -H "X-API-Key: <token>" http://127.0.0.1:5000/api/playground/recipes
import datetime
import os
from flask import Flask
from api_playground import DB as db, PlaygroundAPI


class Author(db.Model):
    __tablename__ = "authors"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False)
    recipes = db.relationship("Recipe", back_populates="author")


class Recipe(db.Model):
    __tablename__ = "recipes"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String, nullable=False)
    body = db.Column(db.Text, nullable=False)
    summary = db.Column(db.String)
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"))
    author = db.relationship("Author", back_populates="recipes")
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def _s_validate(self):
        if self.title and len(self.title) > 100:
            return {"title": ["is too long (maximum is 100 characters)"]}
        return {}


def create_api(app, prefix="/api/playground"):
    api = PlaygroundAPI(app, prefix=prefix, protected=bool(os.getenv("PLAYGROUND_PROTECTED")))
    api.playground_for(
        "recipe",
        Recipe,
        attributes=["title", "summary", "body", {"timestamps": ["created_at", "updated_at"]}],
        relationships=["author"],
        requests={"create": {"fields": ["title", "summary", "body", "author_id"]}, "update": {"fields": ["title", "summary"]}, "delete": True},
        filters=[{"field": "title", "type": "partial"}, {"field": "author_id", "type": "exact"}],
        pagination={"page_size": 10},
    )
    api.playground_for("author", Author, attributes=["name"], relationships=["recipes"])
    return api


def create_app():
    app = Flask("demo_playground")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite:///demo_playground.sqlitedb")
    db.init_app(app)
    with app.app_context():
        db.create_all()
        create_api(app)
        if not db.session.query(Recipe).count():
            author = Author(name="Marcella Hazan")
            db.session.add(author)
            db.session.add(Recipe(title="Spaghetti Carbonara", body="Boil pasta, mix eggs and cheese.", author=author))
            db.session.add(Recipe(title="Tomato Sauce", body="Simmer tomatoes with butter and onion.", author=author))
            db.session.commit()
    return app


app = create_app()

if __name__ == "__main__":
    app.run()
