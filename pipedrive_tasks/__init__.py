"""Pipedrive CRM tasks for declarative workflow steps."""
