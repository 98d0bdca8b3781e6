"""Meetup Adventures: activities, follows and real-time activity chat."""
