# practice_backend/database/models.py

from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

USER_ROLES = ("user", "admin")
ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(200), nullable=False)  # Argon2id
    role = db.Column(db.String(20), nullable=False, default="user")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    posts = db.relationship('BlogPost', back_populates='author', lazy=True)

    def to_dict(self):
        # Never includes the password hash
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "createdAt": _iso(self.created_at),
        }


class FormSubmission(db.Model):
    __tablename__ = 'form_submissions'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    form_data = db.Column(db.JSON, nullable=False, default=dict)
    # Idempotency key; the unique index is what settles concurrent duplicates
    submission_hash = db.Column(db.String(255), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "formData": self.form_data,
            "submissionHash": self.submission_hash,
            "createdAt": _iso(self.created_at),
        }


class Product(db.Model):
    __tablename__ = 'products'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Float, nullable=False)
    category = db.Column(db.String(100), nullable=True, index=True)
    stock = db.Column(db.Integer, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        # Missing optional fields stay None ("unknown"), not zero
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "stock": self.stock,
            "imageUrl": self.image_url,
            "createdAt": _iso(self.created_at),
        }

    def to_summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
        }


class Order(db.Model):
    __tablename__ = 'orders'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    items = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(db.String(20), nullable=False, default="pending")
    total = db.Column(db.Float, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "items": self.items,
            "status": self.status,
            "total": self.total,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Order {self.id} by User {self.user_id} ({self.status})>'


class BlogPost(db.Model):
    __tablename__ = 'blog_posts'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(300), nullable=False)
    slug = db.Column(db.String(300), unique=True, nullable=False)
    content = db.Column(db.Text, nullable=False)
    excerpt = db.Column(db.Text, nullable=True)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    author = db.relationship('User', back_populates='posts')
    meta_title = db.Column(db.String(300), nullable=True)
    meta_description = db.Column(db.Text, nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    published = db.Column(db.Boolean, nullable=False, default=False)
    published_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def _author(self):
        if self.author is None:
            return None
        return {"id": self.author.id, "email": self.author.email}

    def to_summary(self):
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "author": self._author(),
            "tags": self.tags or [],
            "publishedAt": _iso(self.published_at),
        }

    def to_dict(self):
        data = self.to_summary()
        data.update({
            "content": self.content,
            "metaTitle": self.meta_title,
            "metaDescription": self.meta_description,
            "published": self.published,
            "createdAt": _iso(self.created_at),
        })
        return data
