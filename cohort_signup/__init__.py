"""Serverless cohort registration and Stripe payment handlers backed by Notion."""

__version__ = "0.3.0"
