"""
Region records and the RegionSet collection.

A RegionSet wraps a DataFrame with one row per census tract. Raw sets carry
the counts and a representative coordinate; classified sets add the ratio,
category and threshold flags.
"""

from dataclasses import dataclass, fields
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from corridor_model_errors import InvalidInputError

REQUIRED_COLUMNS = ['GEOID', 'total', 'sub', 'longitude', 'latitude']
DERIVED_COLUMNS = ['ratio', 'category', 'passes_high', 'passes_very_high']


@dataclass(frozen=True)
class Region:
    """
    A census tract with its counts and a single representative point.

    Attributes:
        geoid: Tract identifier
        total: Total-count attribute (e.g. occupied housing units)
        sub: Sub-count attribute (e.g. zero-vehicle households)
        longitude: Centroid longitude
        latitude: Centroid latitude
        ratio: sub / total x 100, set by the classifier
        category: Ordinal bucket of the ratio, set by the classifier
        passes_high: ratio >= high threshold, set by the classifier
        passes_very_high: ratio >= very high threshold, set by the classifier
    """
    geoid: str
    total: float
    sub: float
    longitude: float
    latitude: float
    ratio: Optional[float] = None
    category: Optional[str] = None
    passes_high: Optional[bool] = None
    passes_very_high: Optional[bool] = None

    @property
    def coordinate(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)

    @property
    def is_classified(self) -> bool:
        return self.ratio is not None


class RegionSet:
    """
    Ordered collection of regions sharing a reporting vintage.

    The backing frame is copied on the way in and on the way out, so a
    RegionSet never changes after construction.
    """

    def __init__(self, frame: pd.DataFrame, vintage: Optional[int] = None):
        missing_cols = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
        if missing_cols:
            raise InvalidInputError(f"Region data missing required columns: {missing_cols}")

        frame = frame.reset_index(drop=True).copy()
        frame['GEOID'] = frame['GEOID'].astype(str)

        duplicated = frame['GEOID'][frame['GEOID'].duplicated()].unique().tolist()
        if duplicated:
            raise InvalidInputError(f"Duplicate region identifiers: {duplicated[:5]}")

        self._frame = frame
        self.vintage = vintage

    @classmethod
    def from_records(
        cls,
        records: Iterable[Union[Region, Mapping]],
        vintage: Optional[int] = None
    ) -> 'RegionSet':
        """
        Build a RegionSet from Region values or mappings with Region field names.

        Args:
            records: Region instances or dicts with geoid, total, sub,
                longitude and latitude keys
            vintage: Reporting year shared by the records

        Returns:
            RegionSet, classified only if every record carries the derived fields

        Raises:
            InvalidInputError: If the derived fields are filled in for only
                some of the records
        """
        names = [f.name for f in fields(Region)]
        rows = []
        for record in records:
            if isinstance(record, Region):
                row = {name: getattr(record, name) for name in names}
            else:
                missing = [key for key in REQUIRED_COLUMNS[1:] + ['geoid'] if key not in record]
                if missing:
                    raise InvalidInputError(f"Region record missing fields: {missing}")
                row = {name: record.get(name) for name in names}
            rows.append(row)

        frame = pd.DataFrame(rows, columns=names).rename(columns={'geoid': 'GEOID'})
        derived = frame[DERIVED_COLUMNS].notna().to_numpy()
        if not derived.any():
            frame = frame.drop(columns=DERIVED_COLUMNS)
        elif not derived.all():
            raise InvalidInputError("Derived fields are set on only some of the region records")
        return cls(frame, vintage=vintage)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    @property
    def is_classified(self) -> bool:
        return all(col in self._frame.columns for col in DERIVED_COLUMNS)

    def __len__(self) -> int:
        return len(self._frame)

    def __iter__(self) -> Iterator[Region]:
        classified = self.is_classified
        for row in self._frame.itertuples(index=False):
            yield Region(
                geoid=row.GEOID,
                total=float(row.total),
                sub=float(row.sub),
                longitude=float(row.longitude),
                latitude=float(row.latitude),
                ratio=float(row.ratio) if classified else None,
                category=str(row.category) if classified else None,
                passes_high=bool(row.passes_high) if classified else None,
                passes_very_high=bool(row.passes_very_high) if classified else None,
            )

    @property
    def regions(self) -> List[Region]:
        return list(self)

    @property
    def geoids(self) -> List[str]:
        return self._frame['GEOID'].tolist()

    def coordinates(self) -> np.ndarray:
        """Return an (n, 2) array of (longitude, latitude)."""
        return self._frame[['longitude', 'latitude']].to_numpy(dtype=float)

    def passing_high(self) -> 'RegionSet':
        """Regions at or above the high threshold."""
        return self._subset('passes_high')

    def passing_very_high(self) -> 'RegionSet':
        """Regions at or above the very high threshold."""
        return self._subset('passes_very_high')

    def _subset(self, flag: str) -> 'RegionSet':
        if not self.is_classified:
            raise InvalidInputError("RegionSet has not been classified")
        return RegionSet(self._frame[self._frame[flag].astype(bool)], vintage=self.vintage)

    def __repr__(self) -> str:
        state = "classified" if self.is_classified else "raw"
        return f"RegionSet(n={len(self)}, vintage={self.vintage}, {state})"


def as_points(points) -> np.ndarray:
    """
    Coerce coordinates into a finite (n, 2) float array.

    Accepts an (n, 2) array-like of (longitude, latitude), a RegionSet, or a
    sequence of Region values.
    """
    if isinstance(points, RegionSet):
        points = points.coordinates()
    elif isinstance(points, (list, tuple)) and points and all(
        isinstance(point, Region) for point in points
    ):
        points = [region.coordinate for region in points]

    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return arr.reshape(0, 2)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidInputError(f"Expected an (n, 2) coordinate array, got shape {arr.shape}")
    if not np.isfinite(arr).all():
        raise InvalidInputError("Coordinates must be finite")
    return arr
