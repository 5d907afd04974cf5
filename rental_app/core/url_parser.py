import logging
from typing import List

logger = logging.getLogger(__name__)


class URLParser:
    def parse_url_list(self, raw_value: str, name: str) -> List[str]:
        origins = [v.strip().rstrip("/") for v in raw_value.split(",") if v.strip()]

        valid_origins = [
            v for v in origins if v.startswith("http://") or v.startswith("https://")
        ]
        if len(valid_origins) != len(origins):
            logger.warning(
                f"Ignoring {len(origins) - len(valid_origins)} malformed origin(s) in {name}"
            )

        return valid_origins


parser = URLParser()
