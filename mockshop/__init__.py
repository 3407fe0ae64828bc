from flask import Flask
from .config import Config
from .extensions import cors, data
from .auth import register_auth
from .handlers import register_error_handlers
from .logging_config import configure_logging


def create_app(config_class: type[Config] = Config):
    app = Flask(__name__, template_folder="templates")
    app.config.from_object(config_class)
    app.json.sort_keys = False

    configure_logging(app)

    # Extensions
    cors.init_app(app)
    data.init_app(app)

    # Request guards and JSON error envelopes
    register_auth(app)
    register_error_handlers(app)

    # Blueprints
    from .routes.docs_api import bp as docs_api
    from .routes.products_api import bp as products_api
    from .routes.categories_api import bp as categories_api
    from .routes.customers_api import bp as customers_api
    from .routes.orders_api import bp as orders_api
    from .routes.carts_api import bp as carts_api
    from .routes.wishlists_api import bp as wishlists_api
    from .routes.promotions_api import bp as promotions_api
    from .routes.support_api import bp as support_api
    from .routes.faq_api import bp as faq_api
    from .routes.returns_api import bp as returns_api
    from .routes.notifications_api import bp as notifications_api
    from .routes.search_api import bp as search_api
    from .routes.auth_api import bp as auth_api
    from .routes.admin_api import bp as admin_api

    for blueprint in (
        products_api, categories_api, customers_api, orders_api, carts_api,
        wishlists_api, promotions_api, support_api, faq_api, returns_api,
        notifications_api, search_api, auth_api, admin_api,
    ):
        app.register_blueprint(blueprint, url_prefix="/api")
    app.register_blueprint(docs_api)

    app.logger.info("Serving data from %s", app.extensions[data.key].mode)
    return app
