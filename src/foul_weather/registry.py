# ABOUTME: Static registry of NWS forecast offices and their dispatcher batches.
# ABOUTME: Resolves batches to work units and derives the scheduler jobs for one dispatch strategy.

from dataclasses import dataclass
from typing import Literal

import structlog

from foul_weather.models import Batch, WorkUnit

log = structlog.get_logger()

SUBSCRIBER_SWEEP_JOB = "subscriber-sweep"
SUBSCRIBER_SWEEP_CRON = "*/30 * * * *"

# Canonical office table: WFO code -> display name.
OFFICES: dict[str, str] = {
    "ABQ": "Albuquerque", "ABR": "Aberdeen", "AFC": "Anchorage", "AFG": "Fairbanks",
    "AJK": "Juneau", "AKQ": "Wakefield", "ALY": "Albany", "AMA": "Amarillo",
    "APX": "Gaylord", "ARX": "La Crosse", "BGM": "Binghamton", "BIS": "Bismarck",
    "BMX": "Birmingham", "BOI": "Boise", "BOU": "Boulder", "BOX": "Boston/Norton",
    "BRO": "Brownsville", "BTV": "Burlington", "BUF": "Buffalo", "BYZ": "Billings",
    "CAE": "Columbia", "CAR": "Caribou", "CHS": "Charleston (SC)", "CLE": "Cleveland",
    "CRP": "Corpus Christi", "CTP": "State College", "CYS": "Cheyenne", "DDC": "Dodge City",
    "DLH": "Duluth", "DMX": "Des Moines", "DTX": "Detroit/Pontiac", "DVN": "Quad Cities",
    "EAX": "Kansas City/Pleasant Hill", "EKA": "Eureka", "EPZ": "El Paso", "EUG": "Eugene",
    "EWX": "Austin/San Antonio", "FFC": "Peachtree City", "FGF": "Grand Forks",
    "FGZ": "Flagstaff", "FSD": "Sioux Falls", "FWD": "Dallas/Fort Worth", "GID": "Hastings",
    "GJT": "Grand Junction", "GLD": "Goodland", "GRB": "Green Bay", "GRR": "Grand Rapids",
    "GSP": "Greenville-Spartanburg", "GUM": "Tiyan (Guam)", "GYX": "Portland (ME)",
    "HFO": "Honolulu", "HGX": "Houston/Galveston", "HNX": "San Joaquin Valley (Hanford)",
    "HUN": "Huntsville", "ICT": "Wichita", "ILM": "Wilmington (NC)", "ILN": "Wilmington (OH)",
    "ILX": "Lincoln (IL)", "IND": "Indianapolis", "IWX": "Northern Indiana", "JAN": "Jackson",
    "JAX": "Jacksonville", "KEY": "Key West", "LBF": "North Platte", "LCH": "Lake Charles",
    "LIX": "New Orleans/Baton Rouge", "LMK": "Louisville", "LOT": "Chicago",
    "LOX": "Los Angeles/Oxnard", "LSX": "St. Louis", "LUB": "Lubbock", "LWX": "Sterling",
    "LZK": "Little Rock", "MAF": "Midland/Odessa", "MEG": "Memphis", "MFL": "Miami",
    "MFR": "Medford", "MHX": "Newport/Morehead City", "MLB": "Melbourne", "MOB": "Mobile",
    "MPX": "Minneapolis/St. Paul", "MQT": "Marquette", "MRX": "Morristown", "MSO": "Missoula",
    "MTR": "Monterey", "OAX": "Omaha/Valley", "OHX": "Nashville", "OKX": "New York (Upton)",
    "OUN": "Norman (Oklahoma City)", "OTX": "Spokane", "PAH": "Paducah", "PBZ": "Pittsburgh",
    "PDT": "Pendleton", "PHI": "Mount Holly", "PIH": "Pocatello", "PQR": "Portland (OR)",
    "PPG": "Pago Pago", "PSR": "Phoenix", "PUB": "Pueblo", "RAH": "Raleigh/Durham",
    "REV": "Reno", "RIW": "Riverton", "RLX": "Charleston (WV)", "RNK": "Roanoke",
    "ROC": "New York (Buffalo)", "SBN": "South Bend", "SEW": "Seattle/Tacoma",
    "SGF": "Springfield (MO)", "SGX": "San Diego", "SHV": "Shreveport", "SJT": "San Angelo",
    "SJU": "San Juan", "SLC": "Salt Lake City", "STO": "Sacramento", "TAE": "Tallahassee",
    "TBW": "Tampa Bay Area", "TOP": "Topeka", "TSA": "Tulsa", "TWC": "Tucson",
    "UNR": "Rapid City", "VEF": "Las Vegas",
}  # fmt: skip

# Batches by WFO code, spread across time zones. Batch i fires at minute i and i+30.
BATCH_OFFICES: list[list[str]] = [
    ["AKQ", "ABR", "ABQ", "BOI", "AFC", "HFO"],
    ["ALY", "ARX", "BOU", "EKA", "AFG", "GUM"],
    ["BGM", "BIS", "BYZ", "EUG", "AJK", "PPG"],
    ["BOX", "BMX", "CYS", "HNX", "CAE", "CAR"],
    ["BTV", "DDC", "EPZ", "LOX", "CHS", "CLE"],
    ["BUF", "DLH", "FGZ", "MAF", "CTP", "FFC"],
    ["DMX", "GJT", "MFR", "GSP", "GYX", "TOP"],
    ["DTX", "MSO", "MTR", "HUN", "ILM", "EWX"],
    ["DVN", "PIH", "OTX", "ILN", "IWX", "LWX"],
    ["EAX", "RIW", "PDT", "JAX", "KEY", "PUB"],
    ["FGF", "SLC", "PQR", "MLB", "MFL", "UNR"],
    ["FSD", "TWC", "PSR", "MHX", "OKX"],
    ["FWD", "VEF", "REV", "PBZ", "PHI"],
    ["GID", "SGX", "RAH", "RLX", "RNK"],
    ["GLD", "SEW", "ROC", "SJU", "TAE"],
    ["GRB", "TBW", "LBF", "HGX", "SHV", "PAH"],
    ["GRR", "STO", "LCH", "LIX", "LMK"],
    ["ICT", "LOT", "LSX", "LUB", "AMA", "SJT"],
    ["ILX", "LZK", "MEG", "MOB", "BRO", "CRP"],
    ["IND", "MPX", "MQT", "MRX", "APX", "SBN"],
    ["JAN", "OAX", "OHX", "OUN", "TSA", "SGF"],
]  # fmt: skip

DispatchStrategy = Literal["batches", "subscribers"]


@dataclass(frozen=True)
class ScheduledJob:
    """A Cloud Scheduler job definition."""

    name: str
    cron: str
    batch_index: int | None = None


class BatchRegistry:
    """Maps batch indices to WFO codes and derives the scheduler job table."""

    def __init__(
        self,
        offices: dict[str, str] | None = None,
        batch_offices: list[list[str]] | None = None,
    ) -> None:
        self.offices = dict(OFFICES if offices is None else offices)
        table = BATCH_OFFICES if batch_offices is None else batch_offices
        self.batches = [
            Batch(index=i, minute_offset=i % 30, office_codes=list(codes))
            for i, codes in enumerate(table)
        ]

    def get_batch(self, index: int) -> Batch:
        """Get a batch by index.

        Raises:
            KeyError: If no batch exists at that index.
        """
        if not 0 <= index < len(self.batches):
            raise KeyError(f"No batch at index {index}")
        return self.batches[index]

    def resolve(self, index: int) -> list[WorkUnit]:
        """Resolve a batch to its work units, in batch order.

        Codes missing from the office table are logged and left out.
        """
        batch = self.get_batch(index)
        units: list[WorkUnit] = []
        for code in batch.office_codes:
            name = self.offices.get(code)
            if name is None:
                log.error("office_code_not_found", wfo=code, batch=index)
                continue
            units.append(WorkUnit(identifier=code, display_name=name))

        if not units:
            log.warning("batch_has_no_valid_offices", batch=index)
        return units

    def deployed(self, indices: list[int] | None = None) -> list[Batch]:
        """Batches that get a scheduled dispatcher. Empty/None means all."""
        if not indices:
            return list(self.batches)
        return [self.get_batch(i) for i in sorted(set(indices))]

    def schedules(
        self,
        indices: list[int] | None = None,
        strategy: DispatchStrategy = "batches",
    ) -> list[ScheduledJob]:
        """Scheduler jobs for one strategy: the deployed batches, or the subscriber sweep.

        The sweep covers every subscribed office, so it never runs alongside
        the batch jobs.
        """
        if strategy == "subscribers":
            return [ScheduledJob(name=SUBSCRIBER_SWEEP_JOB, cron=SUBSCRIBER_SWEEP_CRON)]
        return [
            ScheduledJob(
                name=f"summary-batch-{batch.index}", cron=batch.cron, batch_index=batch.index
            )
            for batch in self.deployed(indices)
        ]

    def audit(self) -> list[str]:
        """Report data-quality issues between the batch table and the office table."""
        issues: list[str] = []
        seen: dict[str, list[int]] = {}
        for batch in self.batches:
            for code in batch.office_codes:
                seen.setdefault(code, []).append(batch.index)
                if code not in self.offices:
                    issues.append(f"batch {batch.index}: unknown office code {code!r}")

        for code, indices in seen.items():
            if len(indices) > 1:
                issues.append(f"office {code} appears in batches {indices}")

        for code, name in sorted(self.offices.items()):
            if code not in seen:
                issues.append(f"office {code} ({name}) is not in any batch")

        offsets: dict[int, list[int]] = {}
        for batch in self.batches:
            offsets.setdefault(batch.minute_offset, []).append(batch.index)
        for minute, indices in offsets.items():
            if len(indices) > 1:
                issues.append(f"batches {indices} share minute offset {minute}")

        return issues
