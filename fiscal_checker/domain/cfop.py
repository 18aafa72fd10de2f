"""Static CFOP (Código Fiscal de Operações e Prestações) catalog.

Entries within the state (1xxx) and from other states (2xxx) share their
descriptions, as do exits within the state (5xxx) and to other states
(6xxx); the table below is keyed by the three trailing digits and expanded
once at import. Imports (3xxx) and exports (7xxx) are listed in full.
"""
from __future__ import annotations

from typing import Mapping

from .values import parse_int

CFOP_NOT_FOUND = "Descrição não encontrada"

_ENTRY_SUFFIXES: dict[int, str] = {
    101: "Compra para industrialização ou produção rural",
    102: "Compra para comercialização",
    111: "Compra para industrialização de mercadoria recebida anteriormente em consignação industrial",
    113: "Compra para comercialização, de mercadoria recebida anteriormente em consignação mercantil",
    116: "Compra para industrialização ou produção rural originada de encomenda para recebimento futuro",
    117: "Compra para comercialização originada de encomenda para recebimento futuro",
    118: "Compra de mercadoria para comercialização pelo adquirente originário, entregue pelo vendedor remetente ao destinatário, em venda à ordem",
    120: "Compra para industrialização, em venda à ordem, já recebida do vendedor remetente",
    121: "Compra para comercialização, em venda à ordem, já recebida do vendedor remetente",
    122: "Compra para industrialização em que a mercadoria foi remetida pelo fornecedor ao industrializador sem transitar pelo estabelecimento adquirente",
    124: "Industrialização efetuada por outra empresa",
    125: "Industrialização efetuada por outra empresa quando a mercadoria remetida para utilização no processo de industrialização não transitou pelo estabelecimento adquirente da mercadoria",
    126: "Compra para utilização na prestação de serviço sujeita ao ICMS",
    128: "Compra para utilização na prestação de serviço sujeita ao ISSQN",
    151: "Transferência para industrialização ou produção rural",
    152: "Transferência para comercialização",
    153: "Transferência de energia elétrica para distribuição",
    154: "Transferência para utilização na prestação de serviço",
    201: "Devolução de venda de produção do estabelecimento",
    202: "Devolução de venda de mercadoria adquirida ou recebida de terceiros",
    203: "Devolução de venda de produção do estabelecimento, destinada à Zona Franca de Manaus ou Áreas de Livre Comércio",
    204: "Devolução de venda de mercadoria adquirida ou recebida de terceiros, destinada à Zona Franca de Manaus ou Áreas de Livre Comércio",
    205: "Anulação de valor relativo à prestação de serviço de comunicação",
    206: "Anulação de valor relativo à prestação de serviço de transporte",
    207: "Anulação de valor relativo à venda de energia elétrica",
    208: "Devolução de produção do estabelecimento, remetida em transferência",
    209: "Devolução de mercadoria adquirida ou recebida de terceiros, remetida em transferência",
    251: "Compra de energia elétrica para distribuição ou comercialização",
    252: "Compra de energia elétrica por estabelecimento industrial",
    253: "Compra de energia elétrica por estabelecimento comercial",
    301: "Aquisição de serviço de comunicação para execução de serviço da mesma natureza",
    302: "Aquisição de serviço de comunicação por estabelecimento industrial",
    303: "Aquisição de serviço de comunicação por estabelecimento comercial",
    351: "Aquisição de serviço de transporte para execução de serviço da mesma natureza",
    352: "Aquisição de serviço de transporte por estabelecimento industrial",
    353: "Aquisição de serviço de transporte por estabelecimento comercial",
    354: "Aquisição de serviço de transporte por estabelecimento de prestador de serviço de comunicação",
    356: "Aquisição de serviço de transporte por estabelecimento de produtor rural",
    401: "Compra para industrialização ou produção rural em operação com mercadoria sujeita ao regime de substituição tributária",
    403: "Compra para comercialização em operação com mercadoria sujeita ao regime de substituição tributária",
    406: "Compra de bem para o ativo imobilizado cuja mercadoria está sujeita ao regime de substituição tributária",
    407: "Compra de mercadoria para uso ou consumo cuja mercadoria está sujeita ao regime de substituição tributária",
    408: "Transferência para industrialização ou produção rural em operação com mercadoria sujeita ao regime de substituição tributária",
    409: "Transferência para comercialização em operação com mercadoria sujeita ao regime de substituição tributária",
    410: "Devolução de venda de produção do estabelecimento em operação com produto sujeito ao regime de substituição tributária",
    411: "Devolução de venda de mercadoria adquirida ou recebida de terceiros em operação com mercadoria sujeita ao regime de substituição tributária",
    551: "Compra de bem para o ativo imobilizado",
    552: "Transferência de bem do ativo imobilizado",
    553: "Devolução de venda de bem do ativo imobilizado",
    554: "Retorno de bem do ativo imobilizado remetido para uso fora do estabelecimento",
    555: "Entrada de bem do ativo imobilizado de terceiro, remetido para uso no estabelecimento",
    556: "Compra de material para uso ou consumo",
    557: "Transferência de material para uso ou consumo",
    651: "Compra de combustível ou lubrificante para industrialização subsequente",
    652: "Compra de combustível ou lubrificante para comercialização",
    653: "Compra de combustível ou lubrificante por consumidor ou usuário final",
    658: "Transferência de combustível ou lubrificante para industrialização",
    659: "Transferência de combustível ou lubrificante para comercialização",
    660: "Devolução de venda de combustível ou lubrificante destinado à industrialização subsequente",
    661: "Devolução de venda de combustível ou lubrificante destinado à comercialização",
    662: "Devolução de venda de combustível ou lubrificante destinado a consumidor ou usuário final",
    901: "Entrada para industrialização por encomenda",
    902: "Retorno de mercadoria remetida para industrialização por encomenda",
    903: "Entrada de mercadoria remetida para industrialização e não aplicada no referido processo",
    904: "Retorno de remessa para venda fora do estabelecimento",
    905: "Entrada de mercadoria recebida para depósito em depósito fechado ou armazém geral",
    906: "Retorno de mercadoria remetida para depósito fechado ou armazém geral",
    907: "Retorno simbólico de mercadoria remetida para depósito fechado ou armazém geral",
    908: "Entrada de bem por conta de contrato de comodato",
    909: "Retorno de bem remetido por conta de contrato de comodato",
    910: "Entrada de bonificação, doação ou brinde",
    911: "Entrada de amostra grátis",
    912: "Entrada de mercadoria ou bem recebido para demonstração",
    913: "Retorno de mercadoria ou bem remetido para demonstração",
    914: "Retorno de mercadoria ou bem remetido para exposição ou feira",
    915: "Entrada de mercadoria ou bem recebido para conserto ou reparo",
    916: "Retorno de mercadoria ou bem remetido para conserto ou reparo",
    917: "Entrada de mercadoria recebida em consignação mercantil ou industrial",
    918: "Devolução de mercadoria remetida em consignação mercantil ou industrial",
    919: "Devolução simbólica de mercadoria vendida ou utilizada em processo industrial, remetida anteriormente em consignação mercantil ou industrial",
    920: "Entrada de vasilhame ou sacaria",
    921: "Retorno de vasilhame ou sacaria",
    922: "Lançamento efetuado a título de simples faturamento decorrente de compra para recebimento futuro",
    923: "Entrada de mercadoria recebida do vendedor remetente, em venda à ordem",
    924: "Entrada para industrialização por conta e ordem do adquirente da mercadoria, quando esta não transitar pelo estabelecimento do adquirente",
    925: "Retorno de mercadoria remetida para industrialização por conta e ordem do adquirente da mercadoria, quando esta não transitar pelo estabelecimento do adquirente",
    949: "Outra entrada de mercadoria ou prestação de serviço não especificada",
}

_EXIT_SUFFIXES: dict[int, str] = {
    101: "Venda de produção do estabelecimento",
    102: "Venda de mercadoria adquirida ou recebida de terceiros",
    103: "Venda de produção do estabelecimento, efetuada fora do estabelecimento",
    104: "Venda de mercadoria adquirida ou recebida de terceiros, efetuada fora do estabelecimento",
    105: "Venda de produção do estabelecimento que não deva por ele transitar",
    106: "Venda de mercadoria adquirida ou recebida de terceiros, que não deva por ele transitar",
    109: "Venda de produção do estabelecimento, destinada à Zona Franca de Manaus ou Áreas de Livre Comércio",
    110: "Venda de mercadoria adquirida ou recebida de terceiros, destinada à Zona Franca de Manaus ou Áreas de Livre Comércio",
    111: "Venda de produção do estabelecimento remetida anteriormente em consignação industrial",
    112: "Venda de mercadoria adquirida ou recebida de terceiros remetida anteriormente em consignação industrial",
    113: "Venda de produção do estabelecimento remetida anteriormente em consignação mercantil",
    114: "Venda de mercadoria adquirida ou recebida de terceiros remetida anteriormente em consignação mercantil",
    115: "Venda de mercadoria adquirida ou recebida de terceiros, recebida anteriormente em consignação mercantil",
    116: "Venda de produção do estabelecimento originada de encomenda para entrega futura",
    117: "Venda de mercadoria adquirida ou recebida de terceiros, originada de encomenda para entrega futura",
    118: "Venda de produção do estabelecimento entregue ao destinatário por conta e ordem do adquirente originário, em venda à ordem",
    119: "Venda de mercadoria adquirida ou recebida de terceiros entregue ao destinatário por conta e ordem do adquirente originário, em venda à ordem",
    120: "Venda de mercadoria adquirida ou recebida de terceiros entregue ao destinatário pelo vendedor remetente, em venda à ordem",
    122: "Venda de produção do estabelecimento remetida para industrialização, por conta e ordem do adquirente, sem transitar pelo estabelecimento do adquirente",
    123: "Venda de mercadoria adquirida ou recebida de terceiros remetida para industrialização, por conta e ordem do adquirente, sem transitar pelo estabelecimento do adquirente",
    124: "Industrialização efetuada para outra empresa",
    125: "Industrialização efetuada para outra empresa quando a mercadoria recebida para utilização no processo de industrialização não transitar pelo estabelecimento adquirente da mercadoria",
    151: "Transferência de produção do estabelecimento",
    152: "Transferência de mercadoria adquirida ou recebida de terceiros",
    153: "Transferência de energia elétrica",
    155: "Transferência de produção do estabelecimento, que não deva por ele transitar",
    156: "Transferência de mercadoria adquirida ou recebida de terceiros, que não deva por ele transitar",
    201: "Devolução de compra para industrialização ou produção rural",
    202: "Devolução de compra para comercialização",
    205: "Anulação de valor relativo a aquisição de serviço de comunicação",
    206: "Anulação de valor relativo a aquisição de serviço de transporte",
    207: "Anulação de valor relativo à compra de energia elétrica",
    208: "Devolução de mercadoria recebida em transferência para industrialização ou produção rural",
    209: "Devolução de mercadoria recebida em transferência para comercialização",
    210: "Devolução de compra para utilização na prestação de serviço",
    251: "Venda de energia elétrica para distribuição ou comercialização",
    252: "Venda de energia elétrica para estabelecimento industrial",
    253: "Venda de energia elétrica para estabelecimento comercial",
    258: "Venda de energia elétrica a não contribuinte",
    301: "Prestação de serviço de comunicação para execução de serviço da mesma natureza",
    303: "Prestação de serviço de comunicação a estabelecimento comercial",
    307: "Prestação de serviço de comunicação a não contribuinte",
    351: "Prestação de serviço de transporte para execução de serviço da mesma natureza",
    352: "Prestação de serviço de transporte a estabelecimento industrial",
    353: "Prestação de serviço de transporte a estabelecimento comercial",
    357: "Prestação de serviço de transporte a não contribuinte",
    359: "Prestação de serviço de transporte a contribuinte ou a não contribuinte quando a mercadoria transportada está dispensada de emissão de nota fiscal",
    360: "Prestação de serviço de transporte a contribuinte substituto em relação ao serviço de transporte",
    401: "Venda de produção do estabelecimento em operação com produto sujeito ao regime de substituição tributária, na condição de contribuinte substituto",
    402: "Venda de produção do estabelecimento de produto sujeito ao regime de substituição tributária, em operação entre contribuintes substitutos do mesmo produto",
    403: "Venda de mercadoria adquirida ou recebida de terceiros em operação com mercadoria sujeita ao regime de substituição tributária, na condição de contribuinte substituto",
    405: "Venda de mercadoria adquirida ou recebida de terceiros em operação com mercadoria sujeita ao regime de substituição tributária, na condição de contribuinte substituído",
    408: "Transferência de produção do estabelecimento em operação com produto sujeito ao regime de substituição tributária",
    409: "Transferência de mercadoria adquirida ou recebida de terceiros em operação com mercadoria sujeita ao regime de substituição tributária",
    410: "Devolução de compra para industrialização ou produção rural em operação com mercadoria sujeita ao regime de substituição tributária",
    411: "Devolução de compra para comercialização em operação com mercadoria sujeita ao regime de substituição tributária",
    412: "Devolução de bem do ativo imobilizado, em operação com mercadoria sujeita ao regime de substituição tributária",
    413: "Devolução de mercadoria destinada ao uso ou consumo, em operação com mercadoria sujeita ao regime de substituição tributária",
    551: "Venda de bem do ativo imobilizado",
    552: "Transferência de bem do ativo imobilizado",
    553: "Devolução de compra de bem para o ativo imobilizado",
    554: "Remessa de bem do ativo imobilizado para uso fora do estabelecimento",
    555: "Devolução de bem do ativo imobilizado de terceiro, recebido para uso no estabelecimento",
    556: "Devolução de compra de material de uso ou consumo",
    557: "Transferência de material de uso ou consumo",
    651: "Venda de combustível ou lubrificante de produção do estabelecimento destinado à industrialização subsequente",
    652: "Venda de combustível ou lubrificante de produção do estabelecimento destinado à comercialização",
    655: "Venda de combustível ou lubrificante adquirido ou recebido de terceiros destinado à industrialização subsequente",
    656: "Venda de combustível ou lubrificante adquirido ou recebido de terceiros destinado a consumidor ou usuário final",
    901: "Remessa para industrialização por encomenda",
    902: "Retorno de mercadoria utilizada na industrialização por encomenda",
    903: "Retorno de mercadoria recebida para industrialização e não aplicada no referido processo",
    904: "Remessa para venda fora do estabelecimento",
    905: "Remessa para depósito fechado ou armazém geral",
    906: "Retorno de mercadoria depositada em depósito fechado ou armazém geral",
    907: "Retorno simbólico de mercadoria depositada em depósito fechado ou armazém geral",
    908: "Remessa de bem por conta de contrato de comodato",
    909: "Retorno de bem recebido por conta de contrato de comodato",
    910: "Remessa em bonificação, doação ou brinde",
    911: "Remessa de amostra grátis",
    912: "Remessa de mercadoria ou bem para demonstração",
    913: "Retorno de mercadoria ou bem recebido para demonstração",
    914: "Remessa de mercadoria ou bem para exposição ou feira",
    915: "Remessa de mercadoria ou bem para conserto ou reparo",
    916: "Retorno de mercadoria ou bem recebido para conserto ou reparo",
    917: "Remessa de mercadoria em consignação mercantil ou industrial",
    918: "Devolução de mercadoria recebida em consignação mercantil ou industrial",
    919: "Devolução simbólica de mercadoria vendida ou utilizada em processo industrial, recebida anteriormente em consignação mercantil ou industrial",
    920: "Remessa de vasilhame ou sacaria",
    921: "Devolução de vasilhame ou sacaria",
    922: "Lançamento efetuado a título de simples faturamento decorrente de venda para entrega futura",
    923: "Remessa de mercadoria por conta e ordem de terceiros, em venda à ordem ou em operações com armazém geral ou depósito fechado",
    924: "Remessa para industrialização por conta e ordem do adquirente da mercadoria, quando esta não transitar pelo estabelecimento do adquirente",
    925: "Retorno de mercadoria recebida para industrialização por conta e ordem do adquirente da mercadoria, quando aquela não transitar pelo estabelecimento do adquirente",
    929: "Lançamento efetuado em decorrência de emissão de documento fiscal relativo a operação ou prestação também registrada em equipamento Emissor de Cupom Fiscal - ECF",
    949: "Outra saída de mercadoria ou prestação de serviço não especificada",
}

_FOREIGN: dict[int, str] = {
    3101: "Compra para industrialização ou produção rural",
    3102: "Compra para comercialização",
    3127: "Compra para industrialização sob o regime de drawback",
    3201: "Devolução de venda de produção do estabelecimento",
    3202: "Devolução de venda de mercadoria adquirida ou recebida de terceiros",
    3551: "Compra de bem para o ativo imobilizado",
    3556: "Compra de material para uso ou consumo",
    3930: "Lançamento efetuado a título de entrada de bem sob amparo de regime especial aduaneiro de admissão temporária",
    3949: "Outra entrada de mercadoria ou prestação de serviço não especificada",
    7101: "Venda de produção do estabelecimento",
    7102: "Venda de mercadoria adquirida ou recebida de terceiros",
    7127: "Venda de produção do estabelecimento sob o regime de drawback",
    7201: "Devolução de compra para industrialização ou produção rural",
    7202: "Devolução de compra para comercialização",
    7551: "Venda de bem do ativo imobilizado",
    7930: "Lançamento efetuado a título de devolução de bem cuja entrada tenha ocorrido sob amparo de regime especial aduaneiro de admissão temporária",
    7949: "Outra saída de mercadoria ou prestação de serviço não especificada",
}


def _build_table() -> dict[int, str]:
    table: dict[int, str] = {}
    for family in (1000, 2000):
        table.update({family + suffix: text for suffix, text in _ENTRY_SUFFIXES.items()})
    for family in (5000, 6000):
        table.update({family + suffix: text for suffix, text in _EXIT_SUFFIXES.items()})
    table.update(_FOREIGN)
    return table


CFOP_DESCRIPTIONS: Mapping[int, str] = _build_table()


class CfopCatalog:
    """Code-to-description lookup over a fixed table."""

    def __init__(self, table: Mapping[int, str] | None = None) -> None:
        self._table = CFOP_DESCRIPTIONS if table is None else table

    def describe(self, code: int | None) -> str:
        if code is None:
            return CFOP_NOT_FOUND
        return self._table.get(code, CFOP_NOT_FOUND)

    def describe_raw(self, value: object) -> str:
        return self.describe(parse_int(value))

    def __contains__(self, code: object) -> bool:
        return code in self._table

    def __len__(self) -> int:
        return len(self._table)
