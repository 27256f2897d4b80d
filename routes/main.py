from flask import Blueprint, render_template, current_app

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Main page with one form per storefront"""
    return render_template('index.html',
                           platforms=list(current_app.platforms.values()),
                           steam_enabled=bool(current_app.config.get('STEAM_API_KEY')))
