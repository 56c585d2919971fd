import google.cloud.logging
from google.cloud.logging.handlers import CloudLoggingHandler


def cloud_logging_handler(**kwargs):
    """dictConfig factory: the handler needs a client built from ambient GCP credentials."""
    client = google.cloud.logging.Client()
    return CloudLoggingHandler(client, **kwargs)
