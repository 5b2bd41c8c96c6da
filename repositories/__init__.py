"""
repositories/ - Data Access Layer
==================================
``base.ScheduleStorage`` is the contract the services depend on.
``memory_repo`` keeps everything in process; ``postgres_storage`` composes the
per-table PostgreSQL repositories, each of which encapsulates all SQL for
one entity and returns domain model objects.
"""
