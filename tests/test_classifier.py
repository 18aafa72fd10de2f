from decimal import Decimal

from fiscal_checker.domain.cfop import CfopCatalog
from fiscal_checker.domain.models import DocumentKind, DocumentRecord, ExceptionKeySets, UploadOrigin
from fiscal_checker.domain.services import DocumentClassifier

OWN_CNPJ = "11222333000181"


def make_key(n: int) -> str:
    return f"3524011234567800019955001{n:09d}{n:010d}"


def make_doc(n: int, issuer: str = "99888777000166", origin: UploadOrigin = UploadOrigin.INBOUND, **fields) -> DocumentRecord:
    key = fields.pop("key", make_key(n))
    return DocumentRecord(
        access_key=key,
        kind=DocumentKind.NFE,
        issuer_cnpj=issuer,
        origin=origin,
        fields={"Chave de acesso": key, "Número": str(n), **fields},
    )


def make_item(n: int, cfop: str, unit_value: str = "10,00", origin: UploadOrigin = UploadOrigin.INBOUND) -> DocumentRecord:
    key = make_key(n)
    return DocumentRecord(
        access_key=key,
        origin=origin,
        fields={"Chave de acesso": key, "CFOP": cfop, "Valor Unitário": unit_value, "Produto": f"item {n}"},
    )


def all_partitions(result):
    return [record for _, records in result.partitions() for record in records]


def test_plain_documents_are_valid():
    classifier = DocumentClassifier()
    docs = [make_doc(1), make_doc(2)]

    result = classifier.classify(docs)

    assert result.valid == tuple(docs)
    assert result.valid_keys == (make_key(1), make_key(2))
    assert result.self_issued == ()


def test_cancellation_beats_every_other_category():
    classifier = DocumentClassifier()
    doc = make_doc(1, issuer=OWN_CNPJ)
    exceptions = ExceptionKeySets.from_raw(operation_not_performed=[make_key(1)])

    result = classifier.classify([doc], exceptions, canceled=[make_doc(1, key=f"NFe{make_key(1)}")], own_cnpj=OWN_CNPJ)

    assert result.canceled == (doc,)
    assert result.operation_not_performed == ()
    assert result.self_issued == ()
    assert result.valid == ()


def test_exception_buckets_follow_fixed_order():
    classifier = DocumentClassifier()
    docs = [make_doc(1), make_doc(2), make_doc(3)]
    exceptions = ExceptionKeySets.from_raw(
        operation_not_performed=[make_key(1)],
        recipient_unaware=[make_key(1), make_key(2)],
        service_disagreement=[f"CTe{make_key(2)}", make_key(3)],
    )

    result = classifier.classify(docs, exceptions)

    assert result.operation_not_performed == (docs[0],)
    assert result.recipient_unaware == (docs[1],)
    assert result.service_disagreement == (docs[2],)
    assert result.valid == ()


def test_exceptions_beat_self_issuance():
    classifier = DocumentClassifier()
    doc = make_doc(1, issuer=OWN_CNPJ)

    result = classifier.classify([doc], ExceptionKeySets.from_raw(recipient_unaware=[make_key(1)]), own_cnpj=OWN_CNPJ)

    assert result.recipient_unaware == (doc,)
    assert result.self_issued == ()


def test_own_cnpj_document_is_self_issued_regardless_of_items():
    classifier = DocumentClassifier()
    doc = make_doc(1, issuer="11.222.333/0001-81")

    result = classifier.classify([doc], own_cnpj=OWN_CNPJ, inbound_items=[make_item(1, "5102")])

    assert result.self_issued == (doc,)
    assert result.valid == ()
    assert result.self_issued_keys == (make_key(1),)
    assert result.inbound_items == ()


def test_return_cfop_on_inbound_items_marks_self_issued():
    classifier = DocumentClassifier()
    returned = make_doc(1)
    purchase = make_doc(2)
    interstate_return = make_doc(3)
    items = [make_item(1, "1202"), make_item(2, "1102"), make_item(3, "2202.0")]

    result = classifier.classify([returned, purchase, interstate_return], inbound_items=items)

    assert result.self_issued == (returned, interstate_return)
    assert result.valid == (purchase,)


def test_return_cfop_ignored_for_outbound_documents():
    classifier = DocumentClassifier()
    outbound = make_doc(1, origin=UploadOrigin.OUTBOUND)

    result = classifier.classify([outbound], inbound_items=[make_item(1, "1202")])

    assert result.valid == (outbound,)


def test_missing_key_falls_through_to_valid():
    classifier = DocumentClassifier()
    keyless = make_doc(1, key="")
    garbage = make_doc(2, key="sem chave")
    exceptions = ExceptionKeySets.from_raw(operation_not_performed=[make_key(1)])

    result = classifier.classify([keyless, garbage], exceptions, canceled=[make_doc(3, key="")])

    assert result.valid == (keyless, garbage)
    assert result.valid_keys == ()


def test_non_record_values_are_skipped():
    classifier = DocumentClassifier()
    doc = make_doc(1)

    result = classifier.classify([doc, None, {"Número": "2"}, "x"])

    assert result.valid == (doc,)
    assert result.skipped == 3


def test_rows_with_a_key_column_are_adapted_into_records():
    classifier = DocumentClassifier()
    row = {"Chave de acesso": f"NFe{make_key(2)}", "CNPJ Emitente": OWN_CNPJ, "Número": "2"}

    result = classifier.classify([make_doc(1), row], own_cnpj=OWN_CNPJ)

    assert result.skipped == 0
    assert [record.normalized_key for record in result.self_issued] == [make_key(2)]
    assert result.self_issued[0].get("Número") == "2"


def test_valid_key_sequence_keeps_repeated_keys():
    classifier = DocumentClassifier()
    docs = [make_doc(1), make_doc(2), make_doc(1, key=f"NFe{make_key(1)}")]

    result = classifier.classify(docs)

    assert result.valid_keys == (make_key(1), make_key(2))
    assert result.valid_key_sequence == (make_key(1), make_key(2), make_key(1))


def test_partitions_are_disjoint_and_cover_the_pool():
    classifier = DocumentClassifier()
    docs = [make_doc(n) for n in range(1, 9)] + [make_doc(9, issuer=OWN_CNPJ), make_doc(10, key="")]
    exceptions = ExceptionKeySets.from_raw(
        operation_not_performed=[make_key(2)],
        recipient_unaware=[make_key(3)],
        service_disagreement=[make_key(4), make_key(2)],
    )

    result = classifier.classify(
        docs,
        exceptions,
        canceled=[make_doc(1), make_doc(3)],
        own_cnpj=OWN_CNPJ,
        inbound_items=[make_item(5, "1201")],
    )

    placed = all_partitions(result)
    assert len(placed) == len(docs)
    assert {id(record) for record in placed} == {id(record) for record in docs}
    assert [r.normalized_key for r in result.canceled] == [make_key(1), make_key(3)]
    assert [r.normalized_key for r in result.self_issued] == [make_key(5), make_key(9)]
    assert docs[-1] in result.valid


def test_classification_is_idempotent():
    classifier = DocumentClassifier()
    docs = [make_doc(n) for n in range(1, 5)]
    exceptions = ExceptionKeySets.from_raw(operation_not_performed=[make_key(2)])

    first = classifier.classify(docs, exceptions)
    second = classifier.classify(first.valid, exceptions)

    assert second.valid == first.valid
    assert second.operation_not_performed == ()


def test_items_follow_their_document_partition():
    classifier = DocumentClassifier()
    docs = [make_doc(1), make_doc(2, issuer=OWN_CNPJ), make_doc(3)]
    inbound = [make_item(1, "1102"), make_item(2, "1102"), make_item(3, "1556"), make_item(4, "1102")]
    outbound = [make_item(2, "5102", origin=UploadOrigin.OUTBOUND), make_item(1, "5102", origin=UploadOrigin.OUTBOUND)]

    result = classifier.classify(
        docs,
        canceled=[make_doc(3)],
        own_cnpj=OWN_CNPJ,
        inbound_items=inbound,
        outbound_items=outbound,
    )

    assert [item.normalized_key for item in result.inbound_items] == [make_key(1)]
    assert [item.normalized_key for item in result.outbound_items] == [make_key(2)]


def test_high_value_item_is_enriched_and_flagged_as_fixed_asset():
    classifier = DocumentClassifier()
    item = make_item(1, "1202", unit_value="1500,00")

    enriched = classifier.enrich_cfop([item])
    assets = classifier.fixed_assets(enriched)

    assert list(enriched[0].fields) == ["Chave de acesso", "CFOP", "Descricao CFOP", "Valor Unitário", "Produto"]
    assert enriched[0].get("Descricao CFOP") == CfopCatalog().describe(1202)
    assert assets == enriched
    assert item.has_field("Descricao CFOP") is False


def test_fixed_assets_come_from_valid_inbound_items():
    classifier = DocumentClassifier()
    docs = [make_doc(1), make_doc(2)]
    inbound = [
        make_item(1, "1551", unit_value="1.500,00"),
        make_item(2, "1556", unit_value="1200,00"),
        make_item(2, "1556", unit_value="abc"),
    ]

    result = classifier.classify(docs, inbound_items=inbound)

    assert len(result.inbound_items) == 3
    assert result.fixed_assets == (result.inbound_items[0],)
    assert result.fixed_assets[0].get("Descricao CFOP") == "Compra de bem para o ativo imobilizado"


def test_existing_description_is_not_overwritten():
    classifier = DocumentClassifier()
    item = DocumentRecord(access_key=make_key(1), fields={"CFOP": "1102", "Descricao CFOP": "manual"})

    (enriched,) = classifier.enrich_cfop([item])

    assert enriched.get("Descricao CFOP") == "manual"


def test_non_numeric_cfop_gets_sentinel_description():
    classifier = DocumentClassifier()
    item = DocumentRecord(access_key=make_key(1), fields={"CFOP": "N/A"})

    (enriched,) = classifier.enrich_cfop([item])

    assert enriched.get("Descricao CFOP") == "Descrição não encontrada"


def test_custom_threshold():
    classifier = DocumentClassifier(fixed_asset_threshold=Decimal("10"))
    items = [make_item(1, "1102", unit_value="10,01"), make_item(2, "1102", unit_value="10,00")]

    assert classifier.fixed_assets(items) == (items[0],)
