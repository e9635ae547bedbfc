import logging
import random
from typing import Any, List, Optional

import requests
from bs4 import BeautifulSoup

from gradetools.extract import assignments_from_api, extract_final_percent
from gradetools.models import Assignment
from gradetools.settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

_LOGGER = logging.getLogger(__name__)


def random_user_agent():
    chrome = f"{random.randint(120, 144)}.0.{random.randint(0, 8000)}.{random.randint(0, 200)}"
    return (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        f"AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{chrome} Safari/537.36"
    )


class PowerSchoolClient:
    """Fetches scores and assignments from a PowerSchool guardian portal.

    The session is expected to be authenticated already; failures resolve
    to ``None`` or an empty list rather than raising.
    """

    SCORES_PATH = "/guardian/scores_ms_guardian.html"
    ASSIGNMENT_LOOKUP_PATH = "/ws/xte/assignment/lookup"

    def __init__(self, base_url=DEFAULT_BASE_URL, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        if session is None:
            session = requests.Session()
            session.trust_env = False
            session.headers.update({"User-Agent": random_user_agent()})
        self.session = session

    def _build_url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def get_final_percent(self, frn: Any, semester: str) -> Optional[float]:
        try:
            response = self.session.get(
                self._build_url(self.SCORES_PATH),
                params={"frn": frn, "fg": semester},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            _LOGGER.warning("Fetching final percent for %s failed: %s", frn, exc)
            return None
        response.encoding = "utf-8"
        soup = BeautifulSoup(response.text or "", "lxml")
        table = soup.select_one("table.linkDescList")
        if table is None:
            _LOGGER.debug("No score table on page for %s", frn)
            return None
        return extract_final_percent(table.decode_contents())

    def lookup_assignments(
        self, student_id: Any, section_id: Any, start_date: str, end_date: str
    ) -> List[Assignment]:
        payload = {
            "student_ids": [student_id],
            "section_ids": [section_id],
            "start_date": start_date,
            "end_date": end_date,
        }
        try:
            response = self.session.post(
                self._build_url(self.ASSIGNMENT_LOOKUP_PATH),
                json=payload,
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            _LOGGER.warning("Assignment lookup for section %s failed: %s", section_id, exc)
            return []
        except ValueError:
            _LOGGER.warning("Assignment lookup for section %s returned no JSON", section_id)
            return []
        return assignments_from_api(data)
