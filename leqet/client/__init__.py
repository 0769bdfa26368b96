from leqet.client.session import AuthSession, ApiError, CancelToken
from leqet.client.api import LeqetApi
from leqet.client.day_log import DayLog, EntryStatus

__all__ = ["AuthSession", "ApiError", "CancelToken", "LeqetApi", "DayLog", "EntryStatus"]
