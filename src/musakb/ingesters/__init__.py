"""Source tree handlers (ingesters) for musakb."""

from musakb.ingesters.musadsl_ingester import COMPANION_GEMS, MusaDSLIngester
from musakb.ingesters.work_ingester import WorkIngester

__all__ = ["MusaDSLIngester", "WorkIngester", "COMPANION_GEMS"]
