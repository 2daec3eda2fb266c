"""
MindLens Infrastructure Layer

External collaborators: encrypted storage, emotion analysis, research
analytics, crisis notifications and the audit trail. Every collaborator
is an abstract interface with a real and an in-memory implementation.
"""
