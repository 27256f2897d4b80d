"""
Application-wide constants and configuration values.
Centralized location for upstream URLs, cache keys and matching thresholds.
"""
from pathlib import Path

# Base directories
BASE_DIR = Path(__file__).parent.parent
TEMPLATES_DIR = BASE_DIR / "templates"

# Upstream catalog sources
PORTS_JSON_URL = "https://raw.githubusercontent.com/PortsMaster/PortMaster-Info/main/ports.json"
LEGACY_PORTS_LISTING_URL = "https://api.github.com/repos/christianhaitian/PortMaster/contents"
PORT_IMAGE_URL_MAIN = "https://raw.githubusercontent.com/PortsMaster/PortMaster-New/main/ports/{name}/{image}"
PORT_IMAGE_URL_MULTIVERSE = "https://raw.githubusercontent.com/PortsMaster-MV/PortMaster-MV-New/main/ports/{name}/{image}"
NO_IMAGE_URL = "https://raw.githubusercontent.com/PortsMaster/PortMaster-Website/main/no.image.png"
PORT_DETAIL_URL = "https://portmaster.games/detail.html?name={key}"
PORTMASTER_GAMES_URL = "https://portmaster.games/games.html"

# Steam Web API
STEAM_RESOLVE_VANITY_URL = "https://api.steampowered.com/ISteamUser/ResolveVanityURL/v0001/"
STEAM_OWNED_GAMES_URL = "https://api.steampowered.com/IPlayerService/GetOwnedGames/v0001/"
STEAM_STORE_APP_URL = "https://store.steampowered.com/app/{appid}"
STEAM_STORE_SEARCH_URL = "https://store.steampowered.com/search/?term={query}"

# Storefront search pages
EPIC_STORE_SEARCH_URL = "https://store.epicgames.com/en-US/search?q={query}"
GOG_STORE_SEARCH_URL = "https://www.gog.com/en/games?query={query}"

HTTP_USER_AGENT = "Steam-Portmaster-Checker/1.0.0"

# Cache configuration
CATALOG_CACHE_KEY = "portmaster_games"
STEAM_GAMES_CACHE_KEY = "steam_games_{steam_id}"
DEFAULT_CACHE_TTL_SECONDS = 60 * 60  # 1 hour

# Timeouts (seconds)
DEFAULT_HTTP_TIMEOUT = 30.0
FALLBACK_HTTP_TIMEOUT = 10.0

# Title normalization
STOPWORDS = frozenset({
    'the', 'a', 'an', 'of', 'in', 'on', 'at', 'to', 'for', 'with', 'by', 'and', '&',
})

# Fuzzy matching thresholds
FUZZY_MIN_LENGTH = 6  # both normalized names must be longer than this
FUZZY_MAX_LENGTH_DIFF = 3
FUZZY_MAX_DISTANCE = 2
FUZZY_MIN_SIMILARITY = 0.95
