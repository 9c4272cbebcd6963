"""
Regenerates the service cards and pricing plans of the marketing site.
Usage: python update_services.py
"""
from gymbooking.content.generator import update_content
from gymbooking.core.config import settings
from gymbooking.core.logger import setup_logging

def main():
    setup_logging()
    update_content(settings.CONTENT_INDEX_PATH, settings.CONTENT_SNAPSHOT_PATH)

if __name__ == "__main__":
    main()
