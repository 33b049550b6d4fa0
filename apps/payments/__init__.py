"""Payments app package.

Creates Midtrans Snap payment sessions for confirmed bookings and
reconciles payment status from the gateway's asynchronous notifications,
manual status checks and a periodic sweep of stale pending payments.
"""
