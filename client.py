import requests
from typing import Optional

from config import load_settings


class TrainingClient:
    """Simple REST client for the training API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        api_token: Optional[str] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"X-API-Token": api_token} if api_token else {}

    @classmethod
    def from_settings(cls, yaml_path: str = "settings.yaml") -> "TrainingClient":
        settings = load_settings(yaml_path)
        return cls(settings["api_base_url"], api_token=settings["api_token"])

    def _get(self, path: str, **params) -> requests.Response:
        resp = requests.get(
            f"{self.base_url}{path}",
            params=params or None,
            headers=self.headers,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp

    def _post(self, path: str, json: dict, **params) -> requests.Response:
        resp = requests.post(
            f"{self.base_url}{path}",
            params=params or None,
            json=json,
            headers=self.headers,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp

    def health(self) -> bool:
        resp = requests.get(f"{self.base_url}/health", timeout=self.timeout)
        return resp.status_code == 200

    def generate_program(self, user_id: str, intake: dict) -> int:
        return self._post("/programs/generate", intake, user_id=user_id).json()["id"]

    def get_program(self, program_id: int) -> dict:
        return self._get(f"/programs/{program_id}").json()

    def list_programs(self, user_id: str, status: Optional[str] = None):
        params = {"user_id": user_id}
        if status is not None:
            params["status"] = status
        return self._get("/programs", **params).json()

    def progressions(self, exercise_id: int) -> dict:
        return self._get(f"/exercises/{exercise_id}/progressions").json()

    def complete_onboarding(self, user_id: str, answers: dict) -> dict:
        return self._post(f"/onboarding/{user_id}", answers).json()

    def assessment_recommendations(self, level: str, frequency: int) -> dict:
        return self._get(
            "/assessment/recommendations", level=level, frequency=frequency
        ).json()
