import logging

logger = logging.getLogger("wikitextkit")
