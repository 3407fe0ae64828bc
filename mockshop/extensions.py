# mockshop/extensions.py
from flask import current_app
from flask_cors import CORS

from .storage import DataContext

# CORS is a real Flask extension (keeps init_app)
cors = CORS()


class DataExtension:
    """
    Gives each app its own ``DataContext`` built from the app config.

    Services reach the active context through ``data.context`` while
    handling a request; tests can also build a ``DataContext`` directly.
    """

    key = "mockshop_data"

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions[self.key] = DataContext(
            fixtures_dir=app.config["FIXTURES_DIR"],
            db_dir=app.config["DB_DIR"],
            use_document_store=app.config["USE_DOCUMENT_STORE"],
        )

    @property
    def context(self) -> DataContext:
        return current_app.extensions[self.key]

data = DataExtension()
