import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectivityChecker:
    """Decides between the full command pipeline and the degraded local path.

    With no check URL configured the answer is ``assume_online``.
    """

    check_url: str = ""
    timeout_s: float = 1.0
    assume_online: bool = True

    def is_online(self) -> bool:
        if not self.check_url:
            return self.assume_online
        try:
            resp = requests.get(self.check_url, timeout=self.timeout_s)
            resp.raise_for_status()
            return True
        except Exception as e:
            logger.warning("Connectivity check against %s failed: %s", self.check_url, e)
            return False
