'''
table_store.py -- minimal row oriented table store: named tables of named
columns holding int, str or empty (None) cells, kept in memory and pickled
to a file as a whole
'''

import os
import pickle

import logutil


class TableStoreError(Exception):
    pass


def check_cell(value):
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # numpy integers and the like
    if hasattr(value, '__index__') and not isinstance(value, bool):
        return int(value)
    raise TableStoreError(f'unsupported cell value {value!r}')


class TableStore(object):
    def __init__(self):
        self._columns = {}
        self._rows = {}

    def tables(self):
        return list(self._columns)

    def has_table(self, name):
        return name in self._columns

    def _table(self, name):
        if name not in self._columns:
            raise TableStoreError(f'no such table: {name}')
        return self._columns[name], self._rows[name]

    def create_or_replace_table(self, name):
        self._columns[name] = []
        self._rows[name] = []

    def create_column(self, table, name):
        columns, rows = self._table(table)
        if name in columns:
            raise TableStoreError(f'column {name} already exists in {table}')
        columns.append(name)
        for row in rows:
            row.append(None)

    def columns(self, table):
        return list(self._table(table)[0])

    def insert_row(self, table, cells):
        columns, rows = self._table(table)
        if len(cells) != len(columns):
            raise TableStoreError(f'{table}: row has {len(cells)} cells, table has {len(columns)} columns')
        rows.append([check_cell(c) for c in cells])

    def select_all(self, table):
        return [list(row) for row in self._table(table)[1]]

    def row_count(self, table):
        return len(self._table(table)[1])

    def save(self, path):
        """ Write the whole store to `path`, replacing the file only once the
        new content is complete.

        """
        tmp = path + '.tmp'
        with open(tmp, 'wb') as f:
            pickle.dump({'columns': self._columns, 'rows': self._rows}, f, -1)
        os.replace(tmp, path)
        logutil.log('STORE', f'saved {len(self._columns)} tables to {path}', level='DEBUG')

    @classmethod
    def load(cls, path):
        with open(path, 'rb') as f:
            data = pickle.load(f)
        try:
            columns, rows = data['columns'], data['rows']
        except (TypeError, KeyError):
            raise TableStoreError(f'{path} is not a table store file') from None
        store = cls()
        store._columns = columns
        store._rows = rows
        logutil.log('STORE', f'loaded {len(columns)} tables from {path}', level='DEBUG')
        return store
