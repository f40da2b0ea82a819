# -*- coding: utf-8 -*-
#
# Création : Jan 7th, 2016
#
# @author: Eric Lapouyade
#

import pytest
from nagmetric import *

LSFSET = '''lsfset:fileset:HEADER:version:reserved:reserved:filesystemName:filesetName
lsfset:fileset:0:1:::gpfs0:root:0:1:Linked:/ibm/gpfs0:--:--:--:--:2048:0:0:65536:

lsfset:fileset:0:1:::gpfs0:home:1:2:Linked:/ibm/gpfs0/home:--:--:--:--:850:0:0:1000:
'''

def test_filter_headers():
    lines = filter_headers(LSFSET)
    assert len(lines) == 2
    assert all('HEADER' not in line for line in lines)

def test_filter_headers_custom_markers():
    assert filter_headers(['EFSSG1000I done', 'a,b,1', '  '], markers=('EFSSG1000I',)) == ['a,b,1']

def test_extract_single_field():
    assert extract_fields('a:b:c', 2) == 'b'
    assert extract_fields('a: b :c', 2) == 'b'

def test_extract_many_fields():
    assert extract_fields('a,b,c', [3, 1], ',') == ['c', 'a']
    assert extract_fields('Oct  5 12:00:01 int001 smbd: 512 children', [1, 4], None) == ['Oct', 'int001']

@pytest.mark.parametrize('index', [0, 4])
def test_extract_out_of_range(index):
    with pytest.raises(ParseError) as excinfo:
        extract_fields('a:b:c', index)
    assert excinfo.value.line == 'a:b:c'
    assert excinfo.value.index == index
    assert str(excinfo.value) == 'Field %s not found (3 fields) : a:b:c' % index

def test_record_schema():
    schema = RecordSchema('lsfset', ':', fileset=8, used=17, maximum=20)
    assert schema.min_fields == 20
    records = schema.parse_all(filter_headers(LSFSET))
    assert [ r.fileset for r in records ] == ['root', 'home']
    assert records[1]['used'] == '850'
    assert records[1].maximum == '1000'

def test_record_is_a_dict():
    rec = RecordSchema('lsrepl', ':', status=9).parse('lsrepl:repl:0:1:::gpfs0:1:FINISHED')
    assert isinstance(rec, Record)
    assert dict(rec) == {'status':'FINISHED'}

def test_record_schema_skips_vendor_messages():
    schema = RecordSchema('lsfset', ':', 'lsfset:', fileset=8, used=17, maximum=20)
    lines = filter_headers(LSFSET + 'EFSSG0466W Warning: quota information is not up to date.\n')
    records = schema.parse_all(lines)
    assert [ r.fileset for r in records ] == ['root', 'home']
    with pytest.raises(ParseError):
        RecordSchema('lsfset', ':', fileset=8).parse_all(lines)

def test_record_schema_short_line():
    schema = RecordSchema('lsrepl', ':', status=9)
    with pytest.raises(ParseError) as excinfo:
        schema.parse('lsrepl:a:b')
    assert 'Bad lsrepl line : field 9 not found' in str(excinfo.value)

def test_status_map():
    health = StatusMap('lshealth', {'OK':OK, 'WARNING':WARNING, 'ERROR':CRITICAL})
    assert health.resolve('ERROR') == CRITICAL
    assert 'OK' in health
    assert 'ok' not in health
    with pytest.raises(ParseError) as excinfo:
        health.resolve('DEGRADED', 'the line')
    assert excinfo.value.line == 'the line'

def test_status_map_options():
    block = StatusMap('block', {'message':OK, 'alert':CRITICAL}, ignore_case=True)
    assert block.resolve('ALERT') == CRITICAL
    repl = StatusMap('lsrepl', {'FAILED':CRITICAL}, default=OK)
    assert repl.resolve('RUNNING') == OK

def test_find_entity():
    records = [ Record({'name':'root'}), Record({'name':'home'}) ]
    assert find_entity(records, 'name', 'home') == [ records[1] ]
    with pytest.raises(EntityNotFound) as excinfo:
        find_entity(records, 'name', 'data', 'Fileset')
    assert str(excinfo.value) == 'Fileset data not found!'
    assert excinfo.value.entity == 'data'

def test_entity_not_found_custom_message():
    e = EntityNotFound('gpfs0', 'Replication', 'No replication found for gpfs0!')
    assert str(e) == 'No replication found for gpfs0!'
    assert isinstance(e, MetricError)
