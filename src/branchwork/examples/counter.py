"""A counter. Every entry in the history remembers its own count

    branchwork run branchwork.examples.counter inc inc :undo dec
"""

from ..machine import Program, Return, Yield, receive, send

program = Program("counter")


@program.step(entry=True)
def start(env, _):
    env["count"] = 0
    return Yield(receive(), then="on_event")


@program.step()
def on_event(env, event):
    kind = event["type"] if isinstance(event, dict) else event
    if kind == "inc":
        env["count"] += 1
    elif kind == "dec":
        env["count"] -= 1
    elif kind == "stop":
        return Return(env["count"])
    else:
        raise ValueError(f"Unknown event {event!r}")
    return Yield(send(env["count"]), then="wait")


@program.step()
def wait(env, _):
    return Yield(receive(), then="on_event")
