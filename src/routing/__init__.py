"""Owner mapping and call routing.

HubSpot owners and Aircall users are collected page by page, joined on email
and cached in memory. Inbound calls are routed to the Aircall user behind the
HubSpot owner of the calling contact.
"""
