"""
Main Application Factory.
"""
from flask import Flask
from flask_restful import Api
from attendance_tracker.config.settings import Config
from attendance_tracker.api.resources.attendance_resource import (
    AttendanceResource,
    ClearResource,
    CycleResource,
    FiltersResource,
    RosterResource,
    SubmitResource,
)
from attendance_tracker.api.resources.search_resource import (
    SearchClearResource,
    SearchRefreshResource,
    SearchResource,
)
from attendance_tracker.api.ui_routes import ui_bp
from attendance_tracker.middleware.error_handler import handle_errors, log_requests
from attendance_tracker.services.attendance_controller import AttendanceController
from attendance_tracker.services.search_service import SearchController, SearchService
from attendance_tracker.services.webhook_service import WebhookService
from attendance_tracker.utils.page_registry import PageControllers, PageRegistry
import atexit
import logging

logger = logging.getLogger(__name__)


def create_app(webhook_service: WebhookService = None, search_service: SearchService = None, config: dict = None):
    """
    Create and configure Flask application.
    """
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    # Validate configuration
    if webhook_service is None:
        try:
            Config.validate()
        except ValueError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise
        webhook_service = WebhookService()
        atexit.register(webhook_service.cleanup)

    search_service = search_service or SearchService()
    require_concrete = app.config.get('REQUIRE_CONCRETE_FILTERS', True)

    def new_page() -> PageControllers:
        return PageControllers(
            attendance=AttendanceController(webhook_service, require_concrete_filters=require_concrete),
            search=SearchController(search_service),
        )

    registry = PageRegistry(new_page)
    app.extensions['page_registry'] = registry

    # Set up error handling and logging middleware
    handle_errors(app)
    log_requests(app)

    # Set security headers
    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        return response

    api = Api(app)
    resource_kwargs = {'registry': registry}

    # Register Resources
    api.add_resource(FiltersResource, '/api/filters', resource_class_kwargs=resource_kwargs)
    api.add_resource(RosterResource, '/api/roster', resource_class_kwargs=resource_kwargs)
    api.add_resource(AttendanceResource, '/api/attendance', resource_class_kwargs=resource_kwargs)
    api.add_resource(CycleResource, '/api/attendance/cycle', resource_class_kwargs=resource_kwargs)
    api.add_resource(ClearResource, '/api/attendance/clear', resource_class_kwargs=resource_kwargs)
    api.add_resource(SubmitResource, '/api/attendance/submit', resource_class_kwargs=resource_kwargs)

    api.add_resource(SearchResource, '/api/search', resource_class_kwargs=resource_kwargs)
    api.add_resource(SearchRefreshResource, '/api/search/refresh', resource_class_kwargs=resource_kwargs)
    api.add_resource(SearchClearResource, '/api/search/clear', resource_class_kwargs=resource_kwargs)

    # Register UI
    app.register_blueprint(ui_bp)

    return app
