import requests

from gradetools.client import PowerSchoolClient
from gradetools.models import AssignmentStatus


class FakeResponse:
    def __init__(self, *, json_data=None, text="", status_code=200):
        self._json_data = json_data
        self.text = text
        self.status_code = status_code
        self.encoding = None

    def json(self):
        if self._json_data is None:
            raise ValueError("No JSON payload")
        return self._json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self._response = response
        self._error = error
        self.last_url = None
        self.last_params = None
        self.last_json = None
        self.last_timeout = None

    def get(self, url, params=None, timeout=None):
        self.last_url = url
        self.last_params = params
        self.last_timeout = timeout
        if self._error:
            raise self._error
        return self._response

    def post(self, url, json=None, timeout=None):
        self.last_url = url
        self.last_json = json
        self.last_timeout = timeout
        if self._error:
            raise self._error
        return self._response


SCORES_PAGE = """
<html>
  <body>
    <table class="linkDescList">
      <tr><td>
        <script>document.write('Final');</script>
        <script>document.write([B+;72;71.4;72.35]);</script>
      </td></tr>
    </table>
  </body>
</html>
"""


def test_default_session_has_user_agent():
    client = PowerSchoolClient(base_url="https://ps.example.org/")

    assert client.base_url == "https://ps.example.org"
    assert "Mozilla/5.0" in client.session.headers["User-Agent"]
    assert client.session.trust_env is False


def test_get_final_percent_parses_scores_page():
    session = FakeSession(FakeResponse(text=SCORES_PAGE))
    client = PowerSchoolClient(base_url="https://ps.example.org", timeout=5, session=session)

    percent = client.get_final_percent("004123", "S1")

    assert percent == 72.35
    assert session.last_url == "https://ps.example.org/guardian/scores_ms_guardian.html"
    assert session.last_params == {"frn": "004123", "fg": "S1"}
    assert session.last_timeout == 5


def test_get_final_percent_without_table_returns_none():
    session = FakeSession(FakeResponse(text="<html><body>Login</body></html>"))
    client = PowerSchoolClient(session=session)

    assert client.get_final_percent("004123", "S1") is None


def test_get_final_percent_network_error_returns_none():
    session = FakeSession(error=requests.ConnectionError("offline"))
    client = PowerSchoolClient(session=session)

    assert client.get_final_percent("004123", "S1") is None


def test_get_final_percent_http_error_returns_none():
    session = FakeSession(FakeResponse(text=SCORES_PAGE, status_code=500))
    client = PowerSchoolClient(session=session)

    assert client.get_final_percent("004123", "S1") is None


def test_lookup_assignments_posts_payload():
    data = [
        {
            "_assignmentsections": [
                {
                    "name": "Essay",
                    "_assignmentscores": [{"actualscoreentered": "A", "ismissing": True}],
                }
            ]
        }
    ]
    session = FakeSession(FakeResponse(json_data=data))
    client = PowerSchoolClient(base_url="https://ps.example.org", session=session)

    assignments = client.lookup_assignments(11, 22, "2024-08-01", "2024-12-20")

    assert session.last_url == "https://ps.example.org/ws/xte/assignment/lookup"
    assert session.last_json == {
        "student_ids": [11],
        "section_ids": [22],
        "start_date": "2024-08-01",
        "end_date": "2024-12-20",
    }
    assert len(assignments) == 1
    assert assignments[0].score == "A"
    assert assignments[0].has_status(AssignmentStatus.MISSING)


def test_lookup_assignments_bad_json_returns_empty():
    session = FakeSession(FakeResponse(text="<html/>"))
    client = PowerSchoolClient(session=session)

    assert client.lookup_assignments(11, 22, "2024-08-01", "2024-12-20") == []


def test_lookup_assignments_network_error_returns_empty():
    session = FakeSession(error=requests.Timeout("slow"))
    client = PowerSchoolClient(session=session)

    assert client.lookup_assignments(11, 22, "2024-08-01", "2024-12-20") == []
