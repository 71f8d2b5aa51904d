"""Commons: community feed, chat and service-request API over Firebase."""
