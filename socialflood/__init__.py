"""SocialFlood: multi-platform connection and publishing client core."""
