import requests
import time
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional
from threading import Lock

from yelpcamp.errors import ExternalServiceFailure

# Constants
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = "YelpCampApp/1.0"
REQUEST_TIMEOUT = 10
RATE_LIMIT_DELAY = 1.1
MAX_RETRIES = 3
CACHE_SIZE = 1024

# Get logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    formatted_address: str


class NominatimGeocoder:
    """Forward geocoder: address string -> GeocodeResult, or None when unresolvable.

    Raises ExternalServiceFailure when the service stays unreachable after retries.
    """

    def __init__(self, base_url=NOMINATIM_SEARCH_URL, user_agent=USER_AGENT,
                 rate_limit_delay=RATE_LIMIT_DELAY, max_retries=MAX_RETRIES, cache_size=CACHE_SIZE):
        self.base_url = base_url
        self.user_agent = user_agent
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.cache_size = cache_size
        # LRU cache to minimize API calls for the same address
        # Format: {normalized address: GeocodeResult}
        self._cache = OrderedDict()
        self._cache_lock = Lock()

    def geocode(self, address) -> Optional[GeocodeResult]:
        if not address or not address.strip():
            return None

        cache_key = " ".join(address.lower().split())
        with self._cache_lock:
            if cache_key in self._cache:
                self._cache.move_to_end(cache_key)
                return self._cache[cache_key]

        retries = 0
        while retries < self.max_retries:
            try:
                time.sleep(self.rate_limit_delay)

                params = {
                    "q": address,
                    "format": "json",
                    "limit": 1,
                    "addressdetails": 0,
                }

                headers = {
                    "User-Agent": self.user_agent
                }

                response = requests.get(
                    self.base_url,
                    params=params,
                    headers=headers,
                    timeout=REQUEST_TIMEOUT
                )

                if response.status_code == 200:
                    data = response.json()
                    if not data:
                        logger.warning(f"No geocoding result for address '{address}'")
                        return None

                    first = data[0]
                    result = GeocodeResult(
                        latitude=float(first["lat"]),
                        longitude=float(first["lon"]),
                        formatted_address=first.get("display_name") or address,
                    )
                    with self._cache_lock:
                        self._cache[cache_key] = result
                        while len(self._cache) > self.cache_size:
                            self._cache.popitem(last=False)
                    logger.info(f"Successfully geocoded address '{address}'")
                    return result

                retries += 1
                wait_time = self.rate_limit_delay * (retries + 1)

                if 400 <= response.status_code < 500 and response.status_code != 429:
                    logger.error(f"Geocoding client error ({response.status_code}) for address '{address}'")
                    return None

                logger.warning(f"Geocoding HTTP error ({response.status_code}) for address '{address}'. Retrying in {wait_time}s... (Attempt {retries}/{self.max_retries})")
                time.sleep(wait_time)

            except requests.RequestException as e:
                retries += 1
                wait_time = self.rate_limit_delay * (retries + 1)
                logger.warning(f"Network error for address '{address}': {e}. Retrying in {wait_time}s... (Attempt {retries}/{self.max_retries})")
                time.sleep(wait_time)
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Malformed geocoding response for address '{address}': {e}")
                return None

        logger.error(f"Failed to geocode address '{address}' after {self.max_retries} attempts")
        raise ExternalServiceFailure(f"Geocoding service unavailable after {self.max_retries} attempts")
