"""Services package - risk scoring, crisis response and submission."""
