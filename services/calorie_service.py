import asyncio
import aiohttp
from typing import Any, Dict, List, Optional

from config import config
from utils.logging_utils import get_logger

logger = get_logger("calories")


class CalorieServiceError(Exception):
    """Calorie estimation endpoint failed or returned an unusable response"""


class CalorieService:
    """
    Client for the external calorie estimation endpoint.
    Sends the finished session log together with the user's health profile
    and returns the total calories burned.
    """

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or config.calorie_api_url
        self.timeout = timeout or config.calorie_timeout

    async def calculate(
        self,
        user_id: Optional[str],
        workouts: List[Dict[str, Any]],
        user_profile: Optional[Dict[str, Any]] = None
    ) -> float:
        """
        POST the session log and return totalCalories from the response.
        Raises CalorieServiceError on network, HTTP or payload errors.
        """
        payload = {
            "userId": user_id,
            "workouts": workouts,
            "userProfile": user_profile,
        }
        logger.info(f"Requesting calorie estimate for {len(workouts)} exercise(s)")

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, json=payload) as response:
                    if response.status != 200:
                        raise CalorieServiceError(f"API error: {response.status}")
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise CalorieServiceError(f"Calorie request failed: {e}") from e

        try:
            total = float(data["totalCalories"])
        except (KeyError, TypeError, ValueError) as e:
            raise CalorieServiceError(f"Malformed calorie response: {data!r}") from e

        logger.info(f"Calorie estimate received: {total:.1f}")
        return total

# Global service instance
calorie_service = CalorieService()
