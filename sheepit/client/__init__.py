"""Client side of the pipeline: API calls and status polling."""

from sheepit.client.api_client import SheepItClient
from sheepit.client.poller import PollOutcome, PollResult, poll_until_settled

__all__ = ["SheepItClient", "PollOutcome", "PollResult", "poll_until_settled"]
