"""Interpreters available without any plugin."""

import sys
from collections.abc import Mapping

from mcpt.interpreters.base import Interpreter

NODE_ENV = {"NODE_OPTIONS": "--experimental-specifier-resolution=node"}

python_interpreter = Interpreter(
    name="python",
    command=[sys.executable, "-u"],
    env={"PYTHONUNBUFFERED": "1"},
)

node_interpreter = Interpreter(
    name="node",
    command=["node"],
    env=NODE_ENV,
)

ts_node_interpreter = Interpreter(
    name="ts-node",
    command=["npx", "ts-node", "--esm"],
    env=NODE_ENV,
)

BUILTIN_INTERPRETERS: Mapping[str, Interpreter] = {
    ".py": python_interpreter,
    ".js": node_interpreter,
    ".mjs": node_interpreter,
    ".cjs": node_interpreter,
    ".ts": ts_node_interpreter,
    ".mts": ts_node_interpreter,
}
