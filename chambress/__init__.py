"""Chambress - incremental materialization of Congress.gov data.

Assets describe cached artifacts (member lists, bill lists, bill details) and
how to check, read and create them. The engine turns an asset and its
dependencies into a job graph, sorts it, and runs it either locally or as a
Dagster job, with every API request going through one shared rate limiter.

Architecture:
- api/ → Congress.gov client, key rotation, rate limiter, response models
- assets/ → asset model, metadata merge, concrete assets, registry
- engine/ → graph builder, sorter, flow composer, executor, runners
- resources/ → Dagster resources (engine context, MongoDB)
- jobs/ → Dagster jobs exposed by chambress.definitions
"""
