# sharedurl/lang/fr.py
STRINGS = {
    "pluginname": "URL partagée",
    "modulename": "URL partagée",
    "modulenameplural": "URLs partagées",
    "modulename_help": (
        "Le module \"URL partagée\" permet à un enseignant de créer un lien vers l'activité d'un autre cours. "
        "Il fonctionne avec le plugin d'inscription \"enrol_shared\" qui permet d'inscrire automatiquement, "
        "et pour une période donnée, un utilisateur dans le cours ciblé."
    ),
    "externalurl": "URL de l'activité",
    "invalidstoredurl": "Impossible d'afficher la page. L'URL doit rediriger vers une activité existante de cette plateforme moodle",
    "invalidurl": "L'URL saisie n'est pas valide",
    "invalidbackup": "Le fichier de sauvegarde n'est pas une sauvegarde valide d'activité URL partagée.",
    "required": "Ce champ est requis.",
    "invalidcoursemodule": "Identifiant de module de cours non valide",
    "nopermissions": "Désolé, vous n'avez actuellement pas les droits d'accès requis pour effectuer ceci ({$a}).",
    "displaynotallowed": "L'option d'affichage choisie n'est pas activée sur ce site.",
    "clicktoopen": "Cliquer sur le lien {$a} pour ouvrir la ressource.",
    "continue": "Continuer",
    "pageshouldredirect": "Cette page devrait être redirigée automatiquement. Si rien ne se passe, veuillez cliquer sur le lien « Continuer » ci-dessous.",
    "editthisactivity": "Paramètres",
    "editcoursesettings": "Modifier les paramètres du cours",
    "displayselect": "Affichage",
    "framesize": "Hauteur du cadre",
    "printintro": "Afficher la description de l'URL",
    "popupwidth": "Largeur de la fenêtre pop-up (en pixels)",
    "popupheight": "Hauteur de la fenêtre pop-up (en pixels)",
    "sharedurl:addinstance": 'Ajouter une nouvelle activité "SharedURL"',
    "sharedurl:view": 'Afficher une activité "SharedURL"',
}
