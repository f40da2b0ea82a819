# -*- coding: utf-8 -*-
#
# Création : Oct 5th, 2015
#
# @author: Eric Lapouyade
#
"""This module provides the tools to cut vendor command outputs into named fields"""

import nagmetric
from textops import DictExt

__all__ = ['MetricError', 'ParseError', 'EntityNotFound', 'filter_headers', 'extract_fields',
           'Record', 'RecordSchema', 'StatusMap', 'find_entity']

class MetricError(Exception):
    """Base class for errors raised while turning collected text into a plugin response

    All these errors are reported as UNKNOWN by :class:`~nagmetric.ActivePlugin`.
    """
    pass

class ParseError(MetricError):
    """Exception raised when a line cannot be cut as expected

    Args:

        msg (str): The error message
        line (str): The faulty line (optional)
        index (int): The field index that was requested (optional)
    """
    def __init__(self, msg, line=None, index=None):
        super(ParseError,self).__init__(msg)
        self.line = line
        self.index = index

    def __str__(self):
        msg = super(ParseError,self).__str__()
        if self.line is not None:
            msg += ' : %s' % self.line
        return msg

class EntityNotFound(MetricError):
    """Exception raised when a named entity (node, fileset, filesystem...) is absent from the data

    Args:

        entity (str): The entity identifier that was looked for
        kind (str): What the entity is, it is used in the message (Default : 'Entity')
        msg (str): A custom message (Default : '<kind> <entity> not found!')
    """
    def __init__(self, entity, kind='Entity', msg=None):
        super(EntityNotFound,self).__init__(msg or '%s %s not found!' % (kind, entity))
        self.entity = entity
        self.kind = kind

def filter_headers(lines, markers=('HEADER',)):
    """Removes header and blank lines

    Args:

        lines (str or list): The text or the lines to filter
        markers (tuple): A line containing one of these strings is a header

    Returns:

        list : The data lines, stripped from their trailing spaces

    Examples:

        >>> filter_headers('lsfset:fileset:HEADER:version\\n\\nlsfset:fileset:0:1\\n')
        ['lsfset:fileset:0:1']
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    return [ line.rstrip() for line in lines
             if line.strip() and not any(m in line for m in markers) ]

def extract_fields(line, indexes, sep=':'):
    """Get one or several fields from a delimited line

    Args:

        line (str): The line to cut
        indexes (int or list of int): The 1-based field index(es)
        sep (str): The field separator, ``None`` means any whitespace

    Returns:

        str or list : The stripped field if ``indexes`` is an integer, a list of fields otherwise

    Raises:

        ParseError: an index is lower than 1 or greater than the number of fields.

    Examples:

        >>> extract_fields('a:b:c', 2)
        'b'
        >>> extract_fields('a, b ,c', [3,1], ',')
        ['c', 'a']
        >>> extract_fields('a:b:c', 4)
        Traceback (most recent call last):
        ...
        ParseError: Field 4 not found (3 fields) : a:b:c
    """
    fields = line.split(sep)
    single = isinstance(indexes, int)
    if single:
        indexes = [indexes]
    values = []
    for index in indexes:
        if index < 1 or index > len(fields):
            raise ParseError('Field %s not found (%s fields)' % (index, len(fields)), line, index)
        values.append(fields[index - 1].strip())
    return values[0] if single else values

class Record(DictExt):
    """A parsed line : fields are available as keys or as attributes"""
    pass

class RecordSchema(object):
    """Named fields layout of a vendor command output

    Instead of cutting lines with magic numbers everywhere, a schema is declared once per
    command output format, then used to parse each line.

    Args:

        name (str): The output format name, used in error messages
        sep (str): The field separator, ``None`` means any whitespace
        prefix (str): if given, :meth:`parse_all` only parses the lines beginning with it : vendor
            messages mixed into the output are skipped
        fields (dict): field name -> 1-based field index

    Examples:

        >>> schema = RecordSchema('lsrepl', ':', 'lsrepl:', status=9, time=11)
        >>> rec = schema.parse('lsrepl::0:1:gpfs0:a:b:c:FINISHED:done:2015/10/05 12.00.00')
        >>> rec.status
        'FINISHED'
        >>> rec['time']
        '2015/10/05 12.00.00'
        >>> len(schema.parse_all(['EFSSG0466W Warning: some warning']))
        0
    """
    def __init__(self, name, sep=':', prefix=None, **fields):
        self.name = name
        self.sep = sep
        self.prefix = prefix
        self.fields = fields
        self._names = list(fields)
        self._indexes = [ fields[n] for n in self._names ]

    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__,self.name)

    @property
    def min_fields(self):
        return max(self._indexes) if self._indexes else 0

    def parse(self, line):
        try:
            values = extract_fields(line, self._indexes, self.sep)
        except ParseError as e:
            raise ParseError('Bad %s line : field %s not found' % (self.name, e.index), line, e.index)
        return Record(dict(zip(self._names, values)))

    def parse_all(self, lines):
        records = []
        for line in lines:
            if self.prefix and not line.startswith(self.prefix):
                nagmetric.logger.debug('parse -> not a %s record : %s', self.name, line)
                continue
            records.append(self.parse(line))
        nagmetric.logger.debug('parse -> %s %s record(s)', len(records), self.name)
        return records

class StatusMap(object):
    """Declarative mapping from vendor status tokens to response levels

    Args:

        name (str): The status source name, used in error messages
        mapping (dict): token -> :class:`~nagmetric.ResponseLevel`
        ignore_case (bool): if True, tokens are compared case-insensitively
        default (:class:`~nagmetric.ResponseLevel`): the level of unmapped tokens. If None (Default),
            an unmapped token is a parse error.

    Examples:

        >>> health = StatusMap('lshealth', {'OK':OK, 'WARNING':WARNING, 'ERROR':CRITICAL})
        >>> health.resolve('ERROR')
        CRITICAL
        >>> health.resolve('DEGRADED')
        Traceback (most recent call last):
        ...
        ParseError: Unknown lshealth status 'DEGRADED'
    """
    def __init__(self, name, mapping, ignore_case=False, default=None):
        self.name = name
        self.ignore_case = ignore_case
        self.default = default
        self.mapping = dict((self._key(k),v) for k,v in mapping.items())

    def _key(self, token):
        token = token.strip()
        return token.lower() if self.ignore_case else token

    def __contains__(self, token):
        return self._key(token) in self.mapping

    def resolve(self, token, line=None):
        try:
            return self.mapping[self._key(token)]
        except KeyError:
            if self.default is not None:
                return self.default
            raise ParseError('Unknown %s status %r' % (self.name, token), line)

def find_entity(records, field, value, kind='Entity'):
    """Returns the records having the wanted value for a field

    Raises:

        EntityNotFound: when no record matches
    """
    found = [ rec for rec in records if rec[field] == value ]
    if not found:
        raise EntityNotFound(value, kind)
    return found
