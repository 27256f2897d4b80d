"""
JSON API for scripted comparisons.
"""

from flask import Blueprint, current_app
import asyncio
import logging

from portcheck.services import get_platform
from routes.compare import run_comparison
from utils.errors import success_response
from utils.validation import CompareRequest, validate_json

api_bp = Blueprint('api', __name__, url_prefix='/api')
logger = logging.getLogger(__name__)


@api_bp.route('/compare', methods=['POST'])
@validate_json(CompareRequest)
def compare(validated_data: CompareRequest):
    """API endpoint to compare a library with the PortMaster catalog"""
    platform = get_platform(current_app.platforms, validated_data.platform)
    report = run_comparison(platform, validated_data.library_input)
    return success_response(report)


@api_bp.route('/catalog', methods=['GET'])
def catalog():
    """API endpoint to list every port in the catalog"""
    games = asyncio.run(current_app.catalog_service.get_catalog())
    return success_response({
        'count': len(games),
        'games': [game.to_dict() for game in games],
    })
