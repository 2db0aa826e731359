"""Host-driven tick loop around an ``ArenaNavigationEnv``.

The host calls ``tick()`` once per simulation tick. Each tick runs the whole
cycle synchronously (action -> physics -> observation/reward/termination)
before returning. Episode resets happen inside the state machine, so the
runner never calls ``env.reset()`` between episodes.

The action source is fixed at construction by ``ControlMode``:
  - POLICY_DRIVEN: ``policy(obs)`` or ``policy.predict(obs)`` (SB3 models).
    Awaitables and futures are waited on before the tick continues.
  - MANUALLY_DRIVEN: ``manual_input()`` returns the two control axes.
Both go through the same action mapper inside the environment.
"""

from __future__ import annotations

import asyncio
import inspect
from concurrent.futures import Future
from dataclasses import dataclass

import numpy as np

from envs.actions import ControlMode
from envs.state import EpisodeSummary


async def _await(awaitable):
    return await awaitable


def resolve_action(raw):
    """Block until an asynchronous policy result is available.

    Awaitables are run on a private event loop, so ``tick()`` cannot resolve
    them while an event loop is already running in this thread.
    """
    if isinstance(raw, Future):
        return raw.result()
    if inspect.isawaitable(raw):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(_await(raw))
        if inspect.iscoroutine(raw):
            raw.close()
        raise ValueError(
            "Awaitable policy results cannot be resolved from inside a running "
            "event loop; call tick() from synchronous code or a worker thread"
        )
    return raw


@dataclass
class StepRecord:
    obs: np.ndarray
    action: np.ndarray
    reward: float
    terminated: bool
    truncated: bool
    info: dict


class EpisodeRunner:
    """Drives one environment tick by tick.

    Args:
        env: ``ArenaNavigationEnv`` (or anything exposing the same
            ``reset``/``step``/``encoder``/``state_machine`` attributes).
        policy: Action source for POLICY_DRIVEN mode.
        control_mode: Which action source to use.
        manual_input: Zero-argument callable for MANUALLY_DRIVEN mode.
        deterministic: Forwarded to ``policy.predict``.
    """

    def __init__(
        self,
        env,
        policy=None,
        control_mode: ControlMode = ControlMode.POLICY_DRIVEN,
        manual_input=None,
        deterministic: bool = True,
    ):
        if not isinstance(control_mode, ControlMode):
            raise ValueError(f"control_mode must be a ControlMode, got {control_mode!r}")
        if control_mode is ControlMode.POLICY_DRIVEN and policy is None:
            raise ValueError("POLICY_DRIVEN mode needs a policy")
        if control_mode is ControlMode.MANUALLY_DRIVEN and manual_input is None:
            raise ValueError("MANUALLY_DRIVEN mode needs a manual_input source")

        self.env = env
        self.policy = policy
        self.control_mode = control_mode
        self.manual_input = manual_input
        self.deterministic = deterministic

        self.obs = None
        self.summaries: list[EpisodeSummary] = []

    def start(self, seed: int | None = None) -> np.ndarray:
        self.obs, _ = self.env.reset(seed=seed)
        return self.obs

    def _next_action(self, obs):
        if self.control_mode is ControlMode.MANUALLY_DRIVEN:
            raw = self.manual_input()
        elif hasattr(self.policy, "predict"):
            raw = resolve_action(
                self.policy.predict(obs, deterministic=self.deterministic)
            )
            raw = raw[0] if isinstance(raw, tuple) else raw
        else:
            raw = self.policy(obs)
        return np.asarray(resolve_action(raw), dtype=np.float32)

    def tick(self) -> StepRecord:
        """Run exactly one tick."""
        if self.obs is None:
            self.start()

        action = self._next_action(self.obs)
        obs, reward, terminated, truncated, info = self.env.step(action)
        record = StepRecord(obs, action, reward, terminated, truncated, info)

        if terminated or truncated:
            self.summaries.append(self.env.state_machine.last_summary)
            # The state machine has already reset; observe the new episode
            self.obs = self.env.encoder.encode(self.env.state_machine.agent_state)
        else:
            self.obs = obs
        return record

    def run(self, n_ticks: int) -> list[StepRecord]:
        return [self.tick() for _ in range(n_ticks)]

    def run_episodes(self, n_episodes: int, max_ticks: int | None = None) -> list[EpisodeSummary]:
        """Tick until ``n_episodes`` more episodes have ended.

        ``max_ticks`` guards against configs with the timeout disabled.
        """
        target = len(self.summaries) + n_episodes
        ticks = 0
        while len(self.summaries) < target:
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.tick()
            ticks += 1
        return self.summaries[target - n_episodes:]
