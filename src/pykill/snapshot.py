"""Process snapshot provider for pykill."""

import logging

import psutil

from pykill.models import ProcessRecord, ProcessSnapshot

logger = logging.getLogger(__name__)


def capture() -> ProcessSnapshot:
    """
    Capture every process visible to the current user.

    Uses psutil.process_iter() with the name prefetched. Processes that
    exit or deny access mid-enumeration are skipped; a process whose name
    cannot be read is kept with name=None. If the enumeration itself fails
    an empty snapshot is returned.
    """
    records: list[ProcessRecord] = []

    try:
        for proc in psutil.process_iter(attrs=["pid", "name"], ad_value=None):
            try:
                info = proc.info
                records.append(
                    ProcessRecord(
                        pid=info.get("pid") or proc.pid,
                        name=info.get("name") or None,
                        process=proc,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
    except (psutil.Error, OSError) as error:
        logger.warning("Process enumeration failed: %s", error)
        return ProcessSnapshot()

    snapshot = ProcessSnapshot(tuple(records))
    logger.debug("Captured %d processes", len(snapshot))
    return snapshot
