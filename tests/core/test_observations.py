"""
Tests for ObservationTable construction, missing values and row access.
"""

import numpy as np
import pandas as pd
import pytest

from pylinmodels.core.exceptions import DimensionError, ValidationError
from pylinmodels.core.observations import ObservationTable


class TestFromColumns:
    """ObservationTable construction from column mappings."""

    def test_numeric_and_label_columns(self):
        obs = ObservationTable.from_columns({
            'x': [1.0, 2.0, 3.0],
            'g': ['a', 'b', 'a'],
        })
        assert obs.n_observations == 3
        assert obs.columns == ('x', 'g')
        assert obs.column('x').dtype == np.float64
        assert obs.column('g').dtype == object
        np.testing.assert_array_equal(obs.row_ids, [0, 1, 2])

    def test_missing_values(self):
        obs = ObservationTable.from_columns({
            'x': [1.0, np.nan, 3.0],
            'g': ['a', None, 'b'],
        })
        np.testing.assert_array_equal(obs.is_missing('x'), [False, True, False])
        np.testing.assert_array_equal(obs.is_missing('g'), [False, True, False])

    def test_missing_token(self):
        obs = ObservationTable.from_columns({'g': ['a', 'NA', 'b']}, missing='NA')
        np.testing.assert_array_equal(obs.is_missing('g'), [False, True, False])

    def test_custom_row_ids(self):
        obs = ObservationTable.from_columns({'x': [1.0, 2.0]}, row_ids=['r1', 'r2'])
        assert obs.row_ids.tolist() == ['r1', 'r2']

    def test_duplicate_row_ids_rejected(self):
        with pytest.raises(ValidationError, match="duplicate row id"):
            ObservationTable.from_columns({'x': [1.0, 2.0]}, row_ids=[7, 7])

    def test_unequal_lengths_rejected(self):
        with pytest.raises(DimensionError, match="Inconsistent"):
            ObservationTable.from_columns({'x': [1.0, 2.0], 'y': [1.0]})

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            ObservationTable.from_columns({})

    def test_columns_are_read_only(self):
        obs = ObservationTable.from_columns({'x': [1.0, 2.0]})
        with pytest.raises(ValueError):
            obs.column('x')[0] = 5.0

    def test_unknown_column(self):
        obs = ObservationTable.from_columns({'x': [1.0]})
        with pytest.raises(KeyError, match="Available"):
            obs.column('z')


class TestRowAccess:
    """Row ids, columns and missingness lookups."""

    def test_positions_preserve_order(self):
        obs = ObservationTable.from_columns({'x': [1.0, 2.0, 3.0]}, row_ids=[10, 20, 30])
        np.testing.assert_array_equal(obs.positions([30, 10]), [2, 0])

    def test_unknown_row_id(self):
        obs = ObservationTable.from_columns({'x': [1.0, 2.0]})
        with pytest.raises(ValidationError, match="unknown row id"):
            obs.positions([0, 5])

    def test_select(self):
        obs = ObservationTable.from_columns({'x': [1.0, 2.0, 3.0]}, row_ids=['a', 'b', 'c'])
        sub = obs.select(['c', 'a'])
        assert sub.row_ids.tolist() == ['c', 'a']
        np.testing.assert_array_equal(sub.column('x'), [3.0, 1.0])


class TestFromDataFrameAndFile:
    """Ingestion from pandas DataFrames and delimited files."""

    def test_from_dataframe_with_id_column(self):
        df = pd.DataFrame({'id': [3, 1, 2], 'x': [0.5, 1.5, 2.5]})
        obs = ObservationTable.from_dataframe(df, id_column='id')
        assert obs.row_ids.tolist() == [3, 1, 2]
        assert 'id' not in obs
        assert obs.metadata['source'] == 'dataframe'

    def test_from_dataframe_bad_id_column(self):
        with pytest.raises(ValidationError, match="id_column"):
            ObservationTable.from_dataframe(pd.DataFrame({'x': [1]}), id_column='id')

    def test_from_file_reserved_token(self, tmp_path):
        path = tmp_path / 'data.csv'
        path.write_text("id,x,g,y\n1,1.5,a,2.0\n2,NA,None,3.0\n3,2.5,b,NA\n")
        obs = ObservationTable.from_file(path, id_column='id')
        assert obs.row_ids.tolist() == [1, 2, 3]
        np.testing.assert_array_equal(obs.is_missing('x'), [False, True, False])
        np.testing.assert_array_equal(obs.is_missing('y'), [False, False, True])
        # Only the reserved token is missing; 'None' is an ordinary label
        assert obs.column('g').tolist() == ['a', 'None', 'b']
        assert obs.metadata['source_path'] == str(path)

    def test_from_file_tsv(self, tmp_path):
        path = tmp_path / 'data.tsv'
        path.write_text("x\ty\n1\t2\n3\t.\n")
        obs = ObservationTable.from_file(path, missing='.')
        np.testing.assert_array_equal(obs.is_missing('y'), [False, True])

    def test_from_file_unknown_suffix(self, tmp_path):
        path = tmp_path / 'data.dat'
        path.write_text("x\n1\n")
        with pytest.raises(ValidationError, match="Unknown file format"):
            ObservationTable.from_file(path)
