"""ClubHQ API package."""
