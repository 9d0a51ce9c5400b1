"""
memberhub: identity, credential and relationship core of a member platform.

- core: settings, credential cipher and key loading, time helpers.
- db: SQLAlchemy models and session helpers.
- repositories: SQLRepository, the only storage entry point.
- services: CredentialStore, FeedComposer, SocialGraphQuery, ActivityRecorder, PersonService.
- routers: thin FastAPI layer over the services.
"""
