# practice_backend/routes.py

# Resource handlers for auth, forms, products, orders, blog and users.
# Each view validates its input, calls one service and shapes the JSON.

from flask import Blueprint, current_app, g, jsonify, request

from practice_backend.authentication.rbac import UserRole, require_auth, require_role
from practice_backend.context import EXTENSION_KEY
from practice_backend.errors import BadRequest, Unauthorized
from practice_backend.security.input_validator import page_count

api = Blueprint('api', __name__)


def services():
    return current_app.extensions[EXTENSION_KEY]


def json_body():
    return services().validator.json_object(request.get_json(silent=True))


def auth_response(message, user, token, status_code):
    return jsonify({'message': message, 'token': token, 'user': user.to_dict()}), status_code


# ==================== AUTH ====================

@api.post('/auth/register')
def register():
    body = json_body()
    user, token = services().credentials.register(body.get('email'), body.get('password'), body.get('role'))
    services().audit.log_security_event('user_registered', {'email': user.email, 'role': user.role}, user_id=user.id)
    return auth_response('User created successfully', user, token, 201)


@api.post('/auth/login')
def login():
    body = json_body()
    try:
        user, token = services().credentials.login(body.get('email'), body.get('password'))
    except Unauthorized:
        services().audit.log_security_event('failed_login', {'email': body.get('email'), 'ip': request.remote_addr})
        raise
    services().audit.log_security_event('successful_login', {'role': user.role}, user_id=user.id)
    return auth_response('Login successful', user, token, 200)


@api.get('/auth/me')
@require_auth
def me():
    return jsonify(services().credentials.get_user(g.user.id).to_dict())


# ==================== FORMS ====================

@api.post('/forms/submit')
@require_auth
def submit_form():
    body = json_body()
    form_data = services().validator.json_object(body.get('formData'), name='formData')
    result = services().ledger.submit(request.headers.get('Idempotency-Key'), g.user.id, form_data)
    if result.duplicate:
        services().audit.log_security_event(
            'duplicate_submission', {'submission_id': result.submission.id}, user_id=g.user.id
        )
        message = 'Duplicate submission prevented'
    else:
        message = 'Form submitted successfully'
    return jsonify({
        'message': message,
        'data': result.submission.to_dict(),
        'duplicate': result.duplicate,
    }), result.status_code


# ==================== PRODUCTS ====================

@api.get('/products')
def list_products():
    products, cached = services().catalog.list_all()
    return jsonify({'products': products, 'cached': cached})


@api.get('/products/search')
def search_products():
    validator = services().validator
    page, limit = validator.parse_pagination(request.args, default_limit=20)
    result = services().catalog.search(
        q=request.args.get('q') or None,
        category=request.args.get('category') or None,
        min_price=validator.parse_number(request.args.get('minPrice'), 'minPrice'),
        max_price=validator.parse_number(request.args.get('maxPrice'), 'maxPrice'),
        page=page,
        limit=limit,
    )
    return jsonify(result)


@api.get('/products/<int:product_id>')
def get_product(product_id):
    return jsonify(services().catalog.get(product_id).to_dict())


@api.post('/products')
@require_auth
@require_role(UserRole.ADMIN)
def create_product():
    validator = services().validator
    body = json_body()
    validator.require_fields(body, 'name', 'price', message='Name and price required')
    product = services().catalog.create(
        name=validator.strip_markup(body['name'], 'name', max_length=200),
        price=validator.parse_number(body['price'], 'price', required=True, minimum=0),
        description=validator.strip_markup(body.get('description'), 'description'),
        category=validator.strip_markup(body.get('category'), 'category', max_length=100),
        stock=validator.parse_int(body.get('stock'), 'stock', minimum=0),
        image_url=validator.optional_string(body.get('imageUrl'), 'imageUrl', max_length=500),
    )
    return jsonify(product.to_dict()), 201


# ==================== ORDERS ====================

@api.post('/orders')
@require_auth
def create_order():
    validator = services().validator
    body = json_body()
    order = services().orders.create(
        user_id=g.user.id,
        items=validator.validate_order_items(body.get('items')),
        total=validator.parse_number(body.get('total'), 'total'),
    )
    return jsonify(order.to_dict()), 201


@api.get('/orders')
@require_auth
def list_orders():
    return jsonify([o.to_dict() for o in services().orders.list_for_user(g.user.id)])


@api.get('/orders/<int:order_id>')
@require_auth
def get_order(order_id):
    return jsonify(services().orders.get_for_user(order_id, g.user.id).to_dict())


@api.patch('/orders/<int:order_id>/status')
@require_auth
@require_role(UserRole.ADMIN)
def update_order_status(order_id):
    body = json_body()
    order = services().orders.update_status(order_id, body.get('status'))
    return jsonify(order.to_dict())


# ==================== BLOG ====================

@api.get('/blog/posts')
def list_posts():
    page, limit = services().validator.parse_pagination(request.args, default_limit=10)
    posts, total = services().blog.list_published(page=page, limit=limit)
    return jsonify({
        'posts': [p.to_summary() for p in posts],
        'pagination': {'page': page, 'limit': limit, 'total': total, 'pages': page_count(total, limit)},
    })


@api.get('/blog/posts/<slug>')
def get_post(slug):
    return jsonify(services().blog.get_published(slug).to_dict())


@api.post('/blog/posts')
@require_auth
@require_role(UserRole.ADMIN)
def create_post():
    validator = services().validator
    body = json_body()
    validator.require_fields(body, 'title', 'slug', 'content', message='Title, slug and content required')
    if not validator.validate_slug(body['slug']):
        raise BadRequest('Slug may only contain lowercase letters, digits and hyphens')
    post = services().blog.create(
        author_id=g.user.id,
        title=validator.strip_markup(body['title'], 'title', max_length=300),
        slug=body['slug'],
        content=validator.sanitize_html(body['content']),
        excerpt=validator.strip_markup(body.get('excerpt'), 'excerpt'),
        meta_title=validator.strip_markup(body.get('metaTitle'), 'metaTitle', max_length=300),
        meta_description=validator.strip_markup(body.get('metaDescription'), 'metaDescription'),
        tags=validator.parse_tags(body.get('tags')),
        published=validator.parse_bool(body.get('published'), 'published'),
    )
    return jsonify(post.to_dict()), 201


# ==================== USERS ====================

@api.get('/users')
@require_auth
@require_role(UserRole.ADMIN)
def list_users():
    page, limit = services().validator.parse_pagination(request.args, default_limit=20)
    users, total = services().credentials.list_users(q=request.args.get('q') or None, page=page, limit=limit)
    return jsonify({
        'data': [u.to_dict() for u in users],
        'pagination': {'page': page, 'limit': limit, 'total': total, 'pages': page_count(total, limit)},
    })
