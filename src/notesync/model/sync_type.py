# SPDX-License-Identifier: MIT

from enum import StrEnum


class SyncType(StrEnum):
    ONE_WAY = "one-way"
    ONE_WAY_DELETE = "one-way-delete"
    TWO_WAY = "two-way"
    REALTIME_ONE_WAY = "realtime-one-way"
    REALTIME_TWO_WAY = "realtime-two-way"

    @property
    def is_realtime(self) -> bool:
        return self in (SyncType.REALTIME_ONE_WAY, SyncType.REALTIME_TWO_WAY)

    @property
    def is_two_way(self) -> bool:
        return self in (SyncType.TWO_WAY, SyncType.REALTIME_TWO_WAY)
