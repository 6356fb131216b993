# practice_backend/resources/blog.py

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from practice_backend.database.models import BlogPost
from practice_backend.errors import Conflict, NotFound


class BlogService:
    def __init__(self, session):
        self.session = session

    def _published(self):
        return self.session.query(BlogPost).options(joinedload(BlogPost.author)).filter(BlogPost.published.is_(True))

    def list_published(self, page=1, limit=10):
        query = self._published()
        total = query.count()
        posts = (
            query.order_by(BlogPost.published_at.desc(), BlogPost.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return posts, total

    def get_published(self, slug):
        post = self._published().filter(BlogPost.slug == slug).first()
        if post is None:
            raise NotFound("Post not found")
        return post

    def create(self, author_id, title, slug, content, excerpt=None, meta_title=None,
               meta_description=None, tags=None, published=False):
        post = BlogPost(
            author_id=author_id,
            title=title,
            slug=slug,
            content=content,
            excerpt=excerpt,
            meta_title=meta_title,
            meta_description=meta_description,
            tags=tags or [],
            published=published,
            published_at=datetime.utcnow() if published else None,
        )
        self.session.add(post)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict("A post with this slug already exists")
        return post
