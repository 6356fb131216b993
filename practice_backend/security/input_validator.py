# practice_backend/security/input_validator.py

import html
import math
import re

import bleach

from practice_backend.errors import BadRequest

# Boundary validation for request bodies and query strings. Payloads are
# checked for their top-level shape only; nested form data stays opaque.


class InputValidator:
    def __init__(self):
        self.allowed_html_tags = {'b', 'i', 'em', 'strong', 'p', 'br', 'ul', 'ol', 'li', 'a', 'h2', 'h3', 'blockquote', 'code', 'pre'}
        self.allowed_html_attributes = {'a': ['href', 'title']}

        self.patterns = {
            'email': re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'),
            'slug': re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$'),
        }

    def json_object(self, payload, name="Request body"):
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise BadRequest(f"{name} must be a JSON object")
        return payload

    def require_fields(self, payload, *fields, message=None):
        missing = [f for f in fields if payload.get(f) in (None, "")]
        if missing:
            raise BadRequest(message or f"Missing required fields: {', '.join(missing)}")

    def normalize_email(self, email):
        if not isinstance(email, str):
            return None
        return email.strip().lower()

    def validate_email(self, email):
        return isinstance(email, str) and bool(self.patterns['email'].match(email))

    def validate_slug(self, slug):
        return isinstance(slug, str) and bool(self.patterns['slug'].match(slug))

    def strip_markup(self, input_str, name="value", max_length=None):
        if input_str is None:
            return None
        if not isinstance(input_str, str):
            raise BadRequest(f"{name} must be a string")
        if max_length and len(input_str) > max_length:
            raise BadRequest(f"{name} must be at most {max_length} characters")
        # plain text out: drop tags, then undo the entity escaping bleach adds
        return html.unescape(bleach.clean(input_str, tags=set(), attributes={}, strip=True)).strip()

    def optional_string(self, value, name, max_length=None):
        if value in (None, ""):
            return None
        if not isinstance(value, str):
            raise BadRequest(f"{name} must be a string")
        if max_length and len(value) > max_length:
            raise BadRequest(f"{name} must be at most {max_length} characters")
        return value.strip()

    def sanitize_html(self, input_str):
        if not isinstance(input_str, str):
            raise BadRequest("Expected a string value")
        return bleach.clean(
            input_str,
            tags=self.allowed_html_tags,
            attributes=self.allowed_html_attributes,
            strip=True,
        ).strip()

    def parse_positive_int(self, value, name, default):
        if value in (None, ""):
            return default
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise BadRequest(f"{name} must be a positive integer")
        if parsed < 1:
            raise BadRequest(f"{name} must be a positive integer")
        return parsed

    def parse_pagination(self, args, default_limit):
        page = self.parse_positive_int(args.get("page"), "page", 1)
        limit = self.parse_positive_int(args.get("limit"), "limit", default_limit)
        return page, limit

    def parse_number(self, value, name, required=False, minimum=None):
        if value in (None, ""):
            if required:
                raise BadRequest(f"{name} is required")
            return None
        if isinstance(value, bool):
            raise BadRequest(f"{name} must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise BadRequest(f"{name} must be a number")
        if math.isnan(number) or math.isinf(number):
            raise BadRequest(f"{name} must be a number")
        if minimum is not None and number < minimum:
            raise BadRequest(f"{name} must be at least {minimum}")
        return number

    def parse_int(self, value, name, minimum=None):
        number = self.parse_number(value, name, minimum=minimum)
        if number is None:
            return None
        if not number.is_integer():
            raise BadRequest(f"{name} must be an integer")
        return int(number)

    def parse_bool(self, value, name, default=False):
        if value is None:
            return default
        if not isinstance(value, bool):
            raise BadRequest(f"{name} must be a boolean")
        return value

    def parse_tags(self, tags):
        if tags is None:
            return []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise BadRequest("tags must be a list of strings")
        # set semantics, first occurrence keeps its position
        seen = []
        for tag in (t.strip() for t in tags):
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    def validate_order_items(self, items):
        if items is None:
            return []
        if not isinstance(items, list):
            raise BadRequest("items must be a list")
        cleaned = []
        for item in items:
            if not isinstance(item, dict):
                raise BadRequest("Each order item must be an object")
            cleaned.append({
                "productId": item.get("productId"),
                "quantity": item.get("quantity"),
                "price": item.get("price"),
            })
        return cleaned


def page_count(total, limit):
    return math.ceil(total / limit) if limit else 0
