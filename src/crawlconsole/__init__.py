"""Crawl Console: client-side resource store for a distributed crawling platform."""
