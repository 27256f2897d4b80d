"""
Comparison routes for the HTML forms.
"""

from flask import Blueprint, request, render_template, current_app
import asyncio
import logging
from typing import Any, Dict, List, Tuple

from portcheck.models import CatalogEntry, LibraryEntry
from portcheck.services import CatalogService, LibraryPlatform, build_report, get_platform, match
from utils.constants import PORTMASTER_GAMES_URL
from utils.errors import AppError, error_page

compare_bp = Blueprint('compare', __name__)
logger = logging.getLogger(__name__)


async def _load_lists(platform: LibraryPlatform, raw_input: str,
                      catalog_service: CatalogService) -> Tuple[List[LibraryEntry], List[CatalogEntry]]:
    """Read the user's library first so input errors surface before any catalog fetch."""
    library = await platform.parse(raw_input)
    logger.info("Fetching Portmaster games...")
    catalog = await catalog_service.get_catalog()
    return library, catalog


def run_comparison(platform: LibraryPlatform, raw_input: str) -> Dict[str, Any]:
    """
    Compare the user's library on a platform with the PortMaster catalog.

    Raises:
        AppError: If the library or the catalog cannot be loaded
    """
    library, catalog = asyncio.run(_load_lists(platform, raw_input, current_app.catalog_service))

    logger.info("Comparing games...")
    matches = match(library, catalog)
    logger.info(f"Found {len(matches)} {platform.display_name} matches "
                f"({len(library)} library games, {len(catalog)} ports)")

    return build_report(platform, library, catalog, matches)


@compare_bp.route('/compare/<platform_key>', methods=['POST'])
def compare(platform_key):
    """Compare a submitted library and render the report page."""
    platform = get_platform(current_app.platforms, platform_key)
    raw_input = request.form.get(platform.input_field, '')

    try:
        report = run_comparison(platform, raw_input)
    except AppError as e:
        logger.warning(f"{platform.display_name} comparison failed: {e.message}")
        return error_page(platform.describe_error(e))
    except Exception as e:
        logger.exception(f"{platform.display_name} comparison error: {e}")
        return error_page(platform.describe_error(e))

    return render_template('report.html',
                           report=report,
                           portmaster_games_url=PORTMASTER_GAMES_URL)
