"""Pre-authored narrative fragments.

Static configuration keyed by pattern × axis × polarity, plus the per-pattern
texts used for the block 1 answers. Nothing here is generated; the narrative
service only selects and concatenates.
"""

from enum import Enum

from pattern_analysis.db.enums import NarrativeAxis, Pattern, PriorityDomain


class Polarity(str, Enum):
    PAIN = "pain"
    RESOURCE = "resource"


DOMAIN_TO_AXIS: dict[PriorityDomain, NarrativeAxis] = {
    PriorityDomain.HEALTH: NarrativeAxis.PERSONAL,
    PriorityDomain.RELATIONSHIPS: NarrativeAxis.RELATIONSHIPS,
    PriorityDomain.PROFESSIONAL: NarrativeAxis.PROFESSIONAL,
}

# How each priority domain is named inside block 1 text
DOMAIN_LABELS: dict[PriorityDomain, str] = {
    PriorityDomain.HEALTH: "Saúde",
    PriorityDomain.RELATIONSHIPS: "Relacionamentos",
    PriorityDomain.PROFESSIONAL: "Profissional/Financeira",
}


# =============================================================================
# Pain / resource library
# =============================================================================

FRAGMENTS: dict[tuple[Pattern, NarrativeAxis, Polarity], str] = {
    # CRIATIVO
    (Pattern.CRIATIVO, NarrativeAxis.PERSONAL, Polarity.PAIN): (
        "O padrão CRIATIVO em estado de dor na área pessoal leva a uma hipersensibilidade "
        "emocional, autocrítica intensa e dificuldade em lidar com críticas. Você pode se "
        "sentir incompreendido, desvalorizado e com emoções intensas que são difíceis de "
        "gerenciar. Há uma tendência à dramatização e ao vitimismo, buscando validação "
        "externa para seu sofrimento."
    ),
    (Pattern.CRIATIVO, NarrativeAxis.RELATIONSHIPS, Polarity.PAIN): (
        "O padrão CRIATIVO em estado de dor na área de relacionamentos manifesta-se como "
        "dependência emocional e medo de abandono. Você tende a se sacrificar pelos outros, "
        "buscar aprovação constantemente e ter dificuldade em estabelecer limites saudáveis. "
        "Os relacionamentos podem se tornar dramas emocionais intensos, onde você se sente "
        "incompreendido e não valorizado."
    ),
    (Pattern.CRIATIVO, NarrativeAxis.PROFESSIONAL, Polarity.PAIN): (
        "O padrão CRIATIVO em estado de dor na área profissional causa autossabotagem, "
        "perfeccionismo paralisante e medo de exposição. Você pode sentir que suas ideias "
        "nunca são boas o suficiente e temer julgamentos. Há dificuldade em finalizar "
        "projetos devido à autocrítica excessiva, e a comparação constante com outros pode "
        "bloquear sua criatividade natural."
    ),
    (Pattern.CRIATIVO, NarrativeAxis.PERSONAL, Polarity.RESOURCE): (
        "O padrão CRIATIVO em estado de recurso na área pessoal manifesta-se como expressão "
        "emocional autêntica e autocompaixão. Você desenvolve sensibilidade equilibrada, "
        "capacidade de processar emoções profundas e uma conexão genuína consigo mesmo. Sua "
        "intuição aguçada permite auto-conhecimento e transformação pessoal contínua."
    ),
    (Pattern.CRIATIVO, NarrativeAxis.RELATIONSHIPS, Polarity.RESOURCE): (
        "O padrão CRIATIVO em estado de recurso na área de relacionamentos expressa-se como "
        "empatia profunda e conexões autênticas. Você tem habilidade para compreender "
        "nuances emocionais, criar intimidade genuína e inspirar outros com sua "
        "autenticidade. Seus relacionamentos são caracterizados por profundidade emocional "
        "e aceitação mútua."
    ),
    (Pattern.CRIATIVO, NarrativeAxis.PROFESSIONAL, Polarity.RESOURCE): (
        "O padrão CRIATIVO em estado de recurso na área profissional manifesta-se como "
        "inovação e expressão única. Você possui pensamento original, capacidade de ver "
        "possibilidades onde outros não veem e coragem para seguir caminhos não "
        "convencionais. Sua criatividade traz soluções inovadoras e inspira transformação "
        "nos ambientes de trabalho."
    ),
    # CONECTIVO
    (Pattern.CONECTIVO, NarrativeAxis.PERSONAL, Polarity.PAIN): (
        "O padrão CONECTIVO em estado de dor na área pessoal manifesta-se como um sentimento "
        "profundo de insegurança e medo da solidão. Você tende a anular suas próprias "
        "necessidades, evitar conflitos a qualquer custo e buscar validação externa "
        "constante. Existe uma dificuldade significativa em dizer \"não\" e estabelecer "
        "limites saudáveis para si mesmo."
    ),
    (Pattern.CONECTIVO, NarrativeAxis.RELATIONSHIPS, Polarity.PAIN): (
        "O padrão CONECTIVO em estado de dor na área de relacionamentos expressa-se como "
        "codependência emocional e medo intenso de rejeição. Você pode se envolver em "
        "relacionamentos desequilibrados onde dá muito mais do que recebe, tem dificuldade "
        "em expressar necessidades próprias e pode permanecer em relações prejudiciais por "
        "medo da solidão."
    ),
    (Pattern.CONECTIVO, NarrativeAxis.PROFESSIONAL, Polarity.PAIN): (
        "O padrão CONECTIVO em estado de dor na área profissional manifesta-se como uma "
        "dificuldade em tomar decisões autônomas e assumir posições de autoridade. Você "
        "tende a priorizar harmonia sobre produtividade, pode sentir ansiedade ao lidar com "
        "tarefas individuais e busca constantemente por aprovação e consenso, mesmo quando "
        "isso compromete a eficiência."
    ),
    (Pattern.CONECTIVO, NarrativeAxis.PERSONAL, Polarity.RESOURCE): (
        "O padrão CONECTIVO em estado de recurso na área pessoal manifesta-se como "
        "autoaceitação e equilíbrio emocional. Você desenvolve a capacidade de atender suas "
        "próprias necessidades enquanto permanece aberto aos outros, cultiva gentileza "
        "consigo mesmo e estabelece limites saudáveis sem culpa ou ansiedade."
    ),
    (Pattern.CONECTIVO, NarrativeAxis.RELATIONSHIPS, Polarity.RESOURCE): (
        "O padrão CONECTIVO em estado de recurso na área de relacionamentos expressa-se como "
        "conexões autênticas e reciprocidade. Você tem habilidade para construir "
        "relacionamentos baseados em respeito mútuo, comunicação honesta e apoio verdadeiro. "
        "Sua presença cria ambientes de confiança e compreensão onde todos se sentem "
        "acolhidos."
    ),
    (Pattern.CONECTIVO, NarrativeAxis.PROFESSIONAL, Polarity.RESOURCE): (
        "O padrão CONECTIVO em estado de recurso na área profissional manifesta-se como "
        "colaboração eficaz e inteligência emocional. Você possui capacidade de construir "
        "equipes coesas, facilitar comunicação entre diferentes pessoas e criar ambientes de "
        "trabalho harmoniosos e produtivos. Sua habilidade natural para entender dinâmicas "
        "de grupo é um catalisador para projetos bem-sucedidos."
    ),
    # FORTE
    (Pattern.FORTE, NarrativeAxis.PERSONAL, Polarity.PAIN): (
        "O padrão FORTE em estado de dor na área pessoal manifesta-se como rigidez emocional "
        "e dificuldade em demonstrar vulnerabilidade. Você tende a reprimir emoções, tem "
        "dificuldade em pedir ajuda e pode desenvolver problemas físicos devido à tensão "
        "acumulada. Há uma resistência a mudanças e um forte apego a rotinas e estruturas."
    ),
    (Pattern.FORTE, NarrativeAxis.RELATIONSHIPS, Polarity.PAIN): (
        "O padrão FORTE em estado de dor na área de relacionamentos expressa-se como controle "
        "excessivo e dificuldade em confiar nos outros. Você pode ser percebido como "
        "inflexível, crítico e intimidador. Há uma tendência a manter distância emocional e "
        "evitar intimidade verdadeira por medo de perder o controle ou ser decepcionado."
    ),
    (Pattern.FORTE, NarrativeAxis.PROFESSIONAL, Polarity.PAIN): (
        "O padrão FORTE em estado de dor na área profissional manifesta-se como "
        "perfeccionismo rígido e microgerenciamento. Você pode ter dificuldade em delegar, "
        "resistência a novas ideias e métodos, e tende a se sobrecarregar por não confiar na "
        "competência alheia. O ambiente de trabalho pode se tornar tenso e pouco "
        "colaborativo sob sua influência."
    ),
    (Pattern.FORTE, NarrativeAxis.PERSONAL, Polarity.RESOURCE): (
        "O padrão FORTE em estado de recurso na área pessoal manifesta-se como resiliência e "
        "estabilidade interna. Você desenvolve disciplina para criar hábitos saudáveis, "
        "capacidade de lidar com desafios sem ser abalado e uma base sólida que permite "
        "flexibilidade sem perder estrutura. Sua força interior se torna um alicerce para "
        "crescimento pessoal."
    ),
    (Pattern.FORTE, NarrativeAxis.RELATIONSHIPS, Polarity.RESOURCE): (
        "O padrão FORTE em estado de recurso na área de relacionamentos expressa-se como "
        "lealdade e presença confiável. Você tem habilidade para oferecer apoio consistente, "
        "manter-se presente em momentos difíceis e construir relacionamentos duradouros "
        "baseados em confiança mútua. Sua estabilidade emocional proporciona segurança às "
        "pessoas próximas a você."
    ),
    (Pattern.FORTE, NarrativeAxis.PROFESSIONAL, Polarity.RESOURCE): (
        "O padrão FORTE em estado de recurso na área profissional manifesta-se como "
        "determinação e comprometimento exemplar. Você possui capacidade de enfrentar "
        "obstáculos com perseverança, manter o foco mesmo sob pressão e executar projetos "
        "até sua conclusão com qualidade consistente. Sua ética de trabalho torna-se "
        "referência e inspira confiança nos colegas."
    ),
    # LIDER
    (Pattern.LIDER, NarrativeAxis.PERSONAL, Polarity.PAIN): (
        "O padrão LÍDER em estado de dor na área pessoal manifesta-se como uma pressão "
        "constante por desempenho e medo do fracasso. Você tende a se definir exclusivamente "
        "por suas conquistas, tem dificuldade em relaxar sem culpa e pode desenvolver um "
        "senso de identidade frágil baseado apenas em realizações externas."
    ),
    (Pattern.LIDER, NarrativeAxis.RELATIONSHIPS, Polarity.PAIN): (
        "O padrão LÍDER em estado de dor na área de relacionamentos expressa-se como "
        "competitividade e necessidade de controle. Você pode transformar relacionamentos em "
        "hierarquias, ter dificuldade em mostrar vulnerabilidade e confundir respeito com "
        "admiração. Há uma tendência a valorizar pessoas pelo status ou utilidade, não pela "
        "conexão emocional."
    ),
    (Pattern.LIDER, NarrativeAxis.PROFESSIONAL, Polarity.PAIN): (
        "O padrão LÍDER em estado de dor na área profissional manifesta-se como workaholism "
        "e ambição desmedida. Você pode sacrificar saúde e relacionamentos pelo sucesso, ter "
        "dificuldade em delegar por perfeccionismo e desenvolver ansiedade constante "
        "relacionada a desempenho e reconhecimento. Existe um medo persistente de ser "
        "ultrapassado ou tornar-se irrelevante."
    ),
    (Pattern.LIDER, NarrativeAxis.PERSONAL, Polarity.RESOURCE): (
        "O padrão LÍDER em estado de recurso na área pessoal manifesta-se como autoconfiança "
        "equilibrada e propósito claro. Você desenvolve capacidade de traçar metas "
        "significativas, assumir responsabilidade pelo próprio crescimento e inspirar a si "
        "mesmo através de desafios. Seu senso de propósito transcende conquistas externas e "
        "abraça valores profundos."
    ),
    (Pattern.LIDER, NarrativeAxis.RELATIONSHIPS, Polarity.RESOURCE): (
        "O padrão LÍDER em estado de recurso na área de relacionamentos expressa-se como "
        "mentoria e capacidade de elevar os outros. Você tem habilidade para reconhecer "
        "potencial nas pessoas, incentivar o crescimento de quem está ao seu redor e criar "
        "relacionamentos baseados em respeito mútuo e admiração autêntica. Sua influência "
        "positiva inspira transformação nos outros."
    ),
    (Pattern.LIDER, NarrativeAxis.PROFESSIONAL, Polarity.RESOURCE): (
        "O padrão LÍDER em estado de recurso na área profissional manifesta-se como visão "
        "estratégica e liderança inspiradora. Você possui capacidade de visualizar "
        "possibilidades futuras, mobilizar pessoas em direção a objetivos comuns e tomar "
        "decisões difíceis com sabedoria e consideração. Sua presença catalisa excelência e "
        "inovação no ambiente de trabalho."
    ),
    # COMPETITIVO
    (Pattern.COMPETITIVO, NarrativeAxis.PERSONAL, Polarity.PAIN): (
        "O padrão COMPETITIVO em estado de dor na área pessoal manifesta-se como uma "
        "comparação constante com os outros e insatisfação crônica. Você tende a se cobrar "
        "excessivamente, tem dificuldade em celebrar conquistas e pode desenvolver ansiedade "
        "por sempre buscar ser melhor, mais rápido ou mais bem-sucedido em todos os aspectos "
        "da vida."
    ),
    (Pattern.COMPETITIVO, NarrativeAxis.RELATIONSHIPS, Polarity.PAIN): (
        "O padrão COMPETITIVO em estado de dor na área de relacionamentos expressa-se como "
        "rivalidade e dificuldade em celebrar o sucesso alheio. Você pode transformar "
        "amizades em competições, ter ciúmes frequentes e buscar constantemente provar seu "
        "valor. As relações tornam-se campos de prova onde você precisa se destacar ou "
        "dominar."
    ),
    (Pattern.COMPETITIVO, NarrativeAxis.PROFESSIONAL, Polarity.PAIN): (
        "O padrão COMPETITIVO em estado de dor na área profissional manifesta-se como uma "
        "obsessão por resultados e status. Você tende a trabalhar compulsivamente, tem "
        "dificuldade com trabalho em equipe genuíno e pode desenvolver burnout por nunca "
        "sentir que fez o suficiente. Há uma tendência a sacrificar ética e bem-estar pela "
        "vitória."
    ),
    (Pattern.COMPETITIVO, NarrativeAxis.PERSONAL, Polarity.RESOURCE): (
        "O padrão COMPETITIVO em estado de recurso na área pessoal manifesta-se como "
        "autodisciplina e busca por excelência pessoal. Você desenvolve capacidade de "
        "estabelecer e alcançar metas desafiadoras, superar seus próprios limites e "
        "celebrar cada avanço no caminho. Seu impulso por melhoria contínua torna-se uma "
        "força positiva para evolução pessoal."
    ),
    (Pattern.COMPETITIVO, NarrativeAxis.RELATIONSHIPS, Polarity.RESOURCE): (
        "O padrão COMPETITIVO em estado de recurso na área de relacionamentos expressa-se "
        "como admiração genuína e capacidade de elevar os outros. Você tem habilidade para "
        "celebrar as conquistas alheias sem comparação, inspirar os outros a darem o melhor "
        "de si e criar relações onde todos se beneficiam do crescimento mútuo. Sua energia "
        "impulsiona todos ao seu redor."
    ),
    (Pattern.COMPETITIVO, NarrativeAxis.PROFESSIONAL, Polarity.RESOURCE): (
        "O padrão COMPETITIVO em estado de recurso na área profissional manifesta-se como "
        "busca por excelência e capacidade de superar desafios. Você possui determinação "
        "para alcançar resultados extraordinários, habilidade para trabalhar eficientemente "
        "sob pressão e visão para identificar oportunidades de melhoria. Sua energia e foco "
        "elevam o padrão de qualidade de toda a equipe."
    ),
}


def fragment(pattern: Pattern, axis: NarrativeAxis, polarity: Polarity) -> str:
    return FRAGMENTS[(pattern, axis, polarity)]


# =============================================================================
# Block 1 (complaint answers)
# =============================================================================

# "{area}" is filled with DOMAIN_LABELS[priority_domain]
BLOCKAGES: dict[Pattern, str] = {
    Pattern.CRIATIVO: (
        "As pessoas com padrão CRIATIVO frequentemente enfrentam bloqueios relacionados à "
        "expressão autêntica, têm dificuldade de se sentirem compreendidas e podem sofrer de "
        "hipersensibilidade emocional. Na área de {area}, isso se manifesta como uma "
        "tendência a se sentir incompreendido ou julgado, levando a um ciclo de "
        "auto-sabotagem."
    ),
    Pattern.CONECTIVO: (
        "No padrão CONECTIVO, os bloqueios geralmente envolvem dependência emocional, "
        "necessidade excessiva de aceitação e dificuldade em estabelecer limites saudáveis. "
        "Isso afeta especialmente sua área de {area}, onde você pode estar constantemente "
        "buscando validação externa e se sacrificando para agradar os outros."
    ),
    Pattern.FORTE: (
        "O padrão FORTE traz bloqueios relacionados à rigidez emocional, dificuldade de "
        "adaptação a mudanças e resistência em demonstrar vulnerabilidade. Na área de "
        "{area}, isso se manifesta como uma tendência a controlar excessivamente situações e "
        "pessoas, gerando estresse e tensão."
    ),
    Pattern.LIDER: (
        "Pessoas com padrão LIDER frequentemente enfrentam bloqueios relacionados à "
        "necessidade de reconhecimento, perfeccionismo e medo do fracasso. Na área de "
        "{area}, isso se traduz em uma pressão constante por resultados e dificuldade em "
        "delegar ou confiar no trabalho dos outros."
    ),
    Pattern.COMPETITIVO: (
        "O padrão COMPETITIVO traz bloqueios relacionados à ansiedade por resultados, "
        "comparação constante com outros e medo de perder oportunidades. Isso impacta "
        "diretamente sua área de {area}, onde você pode estar se cobrando excessivamente e "
        "sentindo que nunca é suficiente."
    ),
}

RELEASE_STEPS: dict[Pattern, str] = {
    Pattern.CRIATIVO: (
        "1. Práticas diárias de expressão criativa sem julgamento\n"
        "2. Exercícios de auto-aceitação e redução da autocrítica\n"
        "3. Cultivar relacionamentos que respeitem sua sensibilidade\n"
        "4. Desenvolver técnicas para regular emoções intensas"
    ),
    Pattern.CONECTIVO: (
        "1. Praticar dizer \"não\" quando necessário, sem culpa\n"
        "2. Identificar e validar suas próprias necessidades primeiro\n"
        "3. Desenvolver atividades que promovam independência\n"
        "4. Buscar relacionamentos baseados em equilíbrio, não em dependência"
    ),
    Pattern.FORTE: (
        "1. Exercícios de respiração e relaxamento para reduzir a rigidez\n"
        "2. Praticar a expressão controlada de emoções em ambientes seguros\n"
        "3. Desenvolver estratégias adaptativas para lidar com mudanças\n"
        "4. Cultivar momentos de descontração e leveza"
    ),
    Pattern.LIDER: (
        "1. Estabelecer metas realistas e celebrar pequenas conquistas\n"
        "2. Praticar delegar tarefas e confiar na capacidade dos outros\n"
        "3. Desenvolver atividades que tragam satisfação pessoal, não apenas status\n"
        "4. Cultivar momentos de descanso sem culpa"
    ),
    Pattern.COMPETITIVO: (
        "1. Praticar gratidão pelo que já conquistou e pelo que já tem\n"
        "2. Focar em competir consigo mesmo, não com os outros\n"
        "3. Desenvolver projetos colaborativos que valorizem contribuições diversas\n"
        "4. Cultivar hobbies sem pressão por performance"
    ),
}

DIAGNOSIS_GREETING = (
    "Olá! Analisei seu perfil emocional com base nas suas fotos e informações fornecidas."
)
DIAGNOSIS_CLOSING = (
    "Esta análise fornecerá insights sobre como seu perfil emocional está relacionado com "
    "seus desafios atuais."
)
RELEASE_INTRO = (
    "Considerando seu perfil emocional único, recomendo uma abordagem personalizada que "
    "integre estratégias para cada componente do seu padrão:"
)
RELEASE_CLOSING = (
    "Estes são apenas os primeiros passos. Ao avançar nesse caminho de autoconhecimento, "
    "você descobrirá novas camadas de compreensão sobre seus padrões emocionais e como "
    "transformá-los em recursos poderosos para sua vida."
)
