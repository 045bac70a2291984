"""Delivery route planner: route assembly over the Google routing APIs."""
