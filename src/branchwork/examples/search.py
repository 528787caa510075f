"""Search-as-you-type, one query in flight at a time

Queries dispatched while one is still running are dropped (limit=1).
"""

import asyncio

from ..machine import Program, Yield, receive, send

program = Program("search")

# Stands in for a network call
LATENCY = 0.01


async def fetch(query: str) -> list:
    await asyncio.sleep(LATENCY)
    if not query:
        raise ValueError("empty query")
    return [f"{query}-{i}" for i in range(3)]


@program.step(entry=True)
def start(env, _):
    env["results"] = []
    return Yield(receive(limit=1), then="search")


@program.step(catch="failed")
async def search(env, query):
    env["query"] = query
    env["results"] = await fetch(query)
    return Yield(send({"query": query, "results": env["results"]}), then="wait")


@program.step()
def failed(env, error):
    return Yield(send({"query": env.get("query"), "error": str(error)}), then="wait")


@program.step()
def wait(env, _):
    return Yield(receive(limit=1), then="search")
