"""Domain Events.

Events describing requests, retries and crawl progress.
"""
