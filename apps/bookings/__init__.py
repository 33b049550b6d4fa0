"""Bookings app package.

This app encapsulates the booking lifecycle: pricing of booked services,
the status state machine and the owner/admin use cases that drive it.
Every transition happens inside a unit of work so that domain events are
published only after the database commit.
"""
