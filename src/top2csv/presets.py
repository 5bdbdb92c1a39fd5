"""Predefined process lists and process selection."""

from collections.abc import Iterable

from top2csv.errors import ConfigurationError, UnknownPresetError

PRESETS: dict[str, tuple[str, ...]] = {
    "all": (
        "ascmanager", "BmfCol", "BmfExcReceiver", "BmfExcSender", "CctCtl",
        "ctlkcmdpro", "daccompms", "daccomrss", "daccontrol", "dbpoller",
        "dbserver", "dpckeqpmgr", "dpckvarmgr", "EcsSmc", "EcsSys",
        "ftsserver", "HdvServer", "historyserver", "inputmgr", "LoginServer",
        "opmserver", "PasCtl", "PisCtl", "RadCom", "RadCtl", "RadPgr",
        "ReaPrgServer", "scsalarmserver", "scsctlgrcserver", "SigCtlServer",
        "SigDpc", "SigLdt", "SigLoc", "taonameserv", "TelSvr", "tmcpex",
        "tmcsup",
    ),
    "ats": (
        "ascmanager", "BmfCol", "ctlkcmdpro", "daccompms", "daccomrss",
        "daccontrol", "dbpoller", "dbserver", "dpckeqpmgr", "dpckvarmgr",
        "ftsserver", "HdvServer", "inputmgr", "ReaPrgServer",
        "scsalarmserver", "SigCtlServer", "SigDpc", "SigLdt", "SigLoc",
        "taonameserv", "tmcpex", "tmcsup",
    ),
    "cms": (
        "ascmanager", "BmfCol", "BmfExcReceiver", "BmfExcSender", "CctCtl",
        "ctlkcmdpro", "daccompms", "daccontrol", "dbpoller", "dbserver",
        "dpckeqpmgr", "dpckvarmgr", "ftsserver", "HdvServer",
        "historyserver", "inputmgr", "LoginServer", "opmserver", "PasCtl",
        "PisCtl", "RadCom", "RadCtl", "ReaPrgServer", "scsalarmserver",
        "scsctlgrcserver", "taonameserv", "TelSvr",
    ),
    "dcs": (
        "ascmanager", "BmfCol", "CctCtl", "ctlkcmdpro", "daccompms",
        "daccomrss", "daccontrol", "dbpoller", "dbserver", "dpckeqpmgr",
        "dpckvarmgr", "EcsSmc", "EcsSys", "ftsserver", "HdvServer",
        "historyserver", "inputmgr", "LoginServer", "PasCtl", "PisCtl",
        "RadCom", "RadCtl", "RadPgr", "ReaPrgServer", "scsalarmserver",
        "scsctlgrcserver", "SigCtlServer", "SigDpc", "SigLdt", "SigLoc",
        "taonameserv", "TelSvr", "tmcsup",
    ),
    "ecs": (
        "ascmanager", "BmfCol", "daccompms", "daccomrss", "daccontrol",
        "dbpoller", "dbserver", "dpckeqpmgr", "dpckvarmgr", "EcsSmc",
        "EcsSys", "HdvServer", "inputmgr", "ReaPrgServer", "scsalarmserver",
        "scsctlgrcserver", "taonameserv",
    ),
    "sms": (
        "ascmanager", "BmfCol", "CctCtl", "ctlkcmdpro", "daccompms",
        "daccomrss", "daccontrol", "dbpoller", "dbserver", "dpckeqpmgr",
        "dpckvarmgr", "EcsSmc", "EcsSys", "ftsserver", "HdvServer",
        "historyserver", "inputmgr", "LoginServer", "PasCtl", "PisCtl",
        "RadCom", "RadCtl", "RadPgr", "ReaPrgServer", "scsalarmserver",
        "scsctlgrcserver", "SigCtlServer", "SigDpc", "SigLdt", "SigLoc",
        "taonameserv", "TelSvr",
    ),
}


def resolve_processes(
    preset: str | None = None, names: Iterable[str] = ()
) -> tuple[str, ...]:
    """
    Build the ordered list of watched processes.

    The preset's processes come first, followed by each explicit name
    that is not already in the list.

    Raises:
        UnknownPresetError: if the preset is not defined.
        ConfigurationError: if no process ends up being selected.
    """
    processes: list[str] = []
    if preset is not None:
        if preset not in PRESETS:
            raise UnknownPresetError(preset)
        processes.extend(PRESETS[preset])

    for name in names:
        if name not in processes:
            processes.append(name)

    if not processes:
        raise ConfigurationError("at least one process must be specified.")
    return tuple(processes)
