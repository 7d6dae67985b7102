"""
UI Routes Blueprint.
Serves HTML pages.
"""
from flask import Blueprint, jsonify, render_template

ui_bp = Blueprint('ui', __name__)

@ui_bp.route('/')
def index():
    """Serve the attendance page."""
    return render_template('attendance.html')

@ui_bp.route('/search')
def search_page():
    """Serve the AI search page."""
    return render_template('search.html')

@ui_bp.route('/health')
def health():
    return jsonify({"status": "healthy"})
