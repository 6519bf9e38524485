"""
Data loading utilities for census tract vehicle availability data.

Loads tract tables exported from the ACS (table B25044 for vehicles
available, B08301 for means of transportation to work) and maps them onto
the RegionSet schema.
"""

import pandas as pd
import numpy as np
from pathlib import Path
import logging

from corridor_model_errors import InvalidInputError
from corridor_model_regions import RegionSet

logger = logging.getLogger(__name__)

# ACS B25044: tenure by vehicles available
ACS_TOTAL_HOUSEHOLDS = 'B25044_001E'
ACS_OWNER_NO_VEHICLE = 'B25044_003E'
ACS_RENTER_NO_VEHICLE = 'B25044_010E'

# ACS B08301: means of transportation to work
ACS_TOTAL_WORKERS = 'B08301_001E'
ACS_TRANSIT_WORKERS = 'B08301_010E'

COLUMN_MAP = {
    'total_households': 'total',
    'zero_vehicle_households': 'sub',
}


class TractDataLoader:
    """
    Census tract data loader.

    Handles loading and initial processing of tract-level vehicle
    availability and commuting data.
    """

    def __init__(self, config):
        """
        Initialize data loader.

        Args:
            config: AnalysisConfig object
        """
        self.config = config
        self.data_dir = Path(config.data_dir)
        self.output_dir = Path(config.output_dir)

    def load_region(self, region: str) -> RegionSet:
        """
        Load census tract data for specified region.

        Args:
            region: Region name (e.g., 'Bay_Area')

        Returns:
            Unclassified RegionSet
        """
        data_file = self.data_dir / f"{region.lower()}_tracts.csv"

        if data_file.exists():
            return self.load_from_file(str(data_file))
        else:
            logger.warning(f"Data file not found: {data_file}")
            return self.to_region_set(self._generate_synthetic_data(region))

    def load_from_file(self, file_path: str) -> RegionSet:
        """Load census tract data from CSV file."""
        logger.info(f"Loading data from {file_path}")

        df = pd.read_csv(file_path, dtype={'GEOID': str})
        return self.to_region_set(df)

    def to_region_set(self, df: pd.DataFrame) -> RegionSet:
        """
        Map a tract table onto the RegionSet schema.

        Accepts either the tidy columns (total_households,
        zero_vehicle_households) or the raw ACS wide columns, whose owner and
        renter zero-vehicle counts are summed.
        """
        df = df.copy()

        if 'total_households' not in df.columns and ACS_TOTAL_HOUSEHOLDS in df.columns:
            df['total_households'] = df[ACS_TOTAL_HOUSEHOLDS]
        if 'zero_vehicle_households' not in df.columns and {
            ACS_OWNER_NO_VEHICLE, ACS_RENTER_NO_VEHICLE
        } <= set(df.columns):
            df['zero_vehicle_households'] = df[ACS_OWNER_NO_VEHICLE] + df[ACS_RENTER_NO_VEHICLE]

        required_cols = ['GEOID', 'total_households', 'zero_vehicle_households',
                         'longitude', 'latitude']
        missing_cols = [col for col in required_cols if col not in df.columns]

        if missing_cols:
            logger.error(f"Missing required columns: {missing_cols}")
            raise InvalidInputError(f"Tract data missing required columns: {missing_cols}")

        df = df.rename(columns=COLUMN_MAP)
        logger.info(f"Loaded {len(df)} census tracts")

        return RegionSet(df[['GEOID', 'total', 'sub', 'longitude', 'latitude']],
                         vintage=self.config.vintage)

    def load_transit_file(self, file_path: str) -> pd.DataFrame:
        """
        Load tract commuting data and compute the public transit share.

        Returns:
            DataFrame with GEOID and transit_pct columns
        """
        logger.info(f"Loading transit data from {file_path}")

        df = pd.read_csv(file_path, dtype={'GEOID': str})
        return self.compute_transit_share(df)

    def compute_transit_share(self, df: pd.DataFrame) -> pd.DataFrame:
        """Derive transit_pct from B08301 counts unless already present."""
        df = df.copy()

        if 'transit_pct' not in df.columns:
            if not {ACS_TOTAL_WORKERS, ACS_TRANSIT_WORKERS} <= set(df.columns):
                raise InvalidInputError(
                    f"Transit data needs transit_pct or {ACS_TOTAL_WORKERS} and {ACS_TRANSIT_WORKERS}"
                )
            total = df[ACS_TOTAL_WORKERS].astype(float)
            df['transit_pct'] = np.where(
                total > 0,
                df[ACS_TRANSIT_WORKERS].astype(float) / total.where(total > 0) * 100,
                np.nan
            )

        df['GEOID'] = df['GEOID'].astype(str)
        return df[['GEOID', 'transit_pct']]

    def _generate_synthetic_data(
        self,
        region: str,
        n_tracts: int = 200,
        n_corridor: int = 30
    ) -> pd.DataFrame:
        """
        Generate synthetic tract data for testing.

        A band of high zero-vehicle tracts runs diagonally through an
        otherwise random scatter of ordinary tracts.
        """
        logger.info(f"Generating synthetic data for {region} ({n_tracts} tracts)")

        rng = np.random.default_rng(self.config.random_seed)

        data = []
        for i in range(n_tracts):
            on_corridor = i < n_corridor
            if on_corridor:
                t = rng.uniform(0, 1)
                longitude = -122.5 + 0.3 * t + rng.normal(0, 0.005)
                latitude = 37.70 + 0.2 * t + rng.normal(0, 0.005)
                share = rng.uniform(0.22, 0.55)
            else:
                longitude = rng.uniform(-122.6, -121.8)
                latitude = rng.uniform(37.2, 38.1)
                share = rng.uniform(0.0, 0.18)

            total = int(rng.uniform(60, 2500))
            data.append({
                'GEOID': f"06075{i:06d}",
                'total_households': total,
                'zero_vehicle_households': int(round(total * share)),
                'longitude': longitude,
                'latitude': latitude,
            })

        return pd.DataFrame(data)

    def save_data(self, data: pd.DataFrame, filename: str) -> Path:
        """Save processed data to file."""
        output_path = self.output_dir / filename
        output_path.parent.mkdir(parents=True, exist_ok=True)

        data.to_csv(output_path, index=False)
        logger.info(f"Saved data to {output_path}")
        return output_path
