"""Clients for the HubSpot and Aircall REST APIs."""
